"""Offline map asset builder: terrain binaries, thumbnails, and manifests."""

__version__ = "0.1.0"
