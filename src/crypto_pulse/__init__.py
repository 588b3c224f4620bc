"""CryptoPulse: polling market monitor with manual analysis reports."""

__version__ = "0.1.0"
