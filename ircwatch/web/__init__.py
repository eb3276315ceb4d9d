"""
Web Layer.

This package downloads remote resources to local temporary storage.
"""

from .fetcher import FetchedFile, ResourceFetcher, RetryPolicy

__all__ = ["FetchedFile", "ResourceFetcher", "RetryPolicy"]
