"""Base64 JPEG resize service."""

__version__ = "1.0.0"
