# src/__init__.py - v1
"""filestorage: content-addressed file storage orchestrator over S3-compatible stores."""

from filestorage.version import __version__

__all__ = ["__version__"]
