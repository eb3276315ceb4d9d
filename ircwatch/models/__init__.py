"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application: the stored IRC configuration and the
application settings.
"""

from .config import StoreConfig
from .network import Channel, Network, NickServ

__all__ = ["Channel", "Network", "NickServ", "StoreConfig"]
