"""
Storage Layer.

This package handles all data persistence: the SQLite database holding the
network and channel configuration, and the configuration file.
"""

from .channels import ChannelStore
from .config_manager import ConfigManager
from .database import Database
from .networks import NetworkStore

__all__ = ["ChannelStore", "ConfigManager", "Database", "NetworkStore"]
