"""plnexus: fetch a market quote from a mock or live provider, with optional span tracing."""

__version__ = "0.1.0"
