"""SaintGrid Pet System: behavior rhythm core."""

__version__ = "0.1.0"
