"""Cricket Digest - daily cricket news, summarized and emailed."""

__version__ = "1.0.0"
