"""Market data adapters.

Adapters are loaded by module path from `config/adapters.manifest.json`, so
this package deliberately imports none of them.
"""
