"""wayfinder – one-stop flight search on top of the Ryanair public API."""

__version__ = "0.1.0"
