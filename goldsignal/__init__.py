"""Gold signal engine: technical, news and macro scoring fused into XAU/USD signals."""

__version__ = "0.1.0"
