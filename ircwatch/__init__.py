"""
ircwatch: persistence for monitored IRC networks and channels, plus a
resource fetcher for remote definition lists.
"""

__version__ = "0.1.0"
