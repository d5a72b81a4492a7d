"""
Refresh policies for the catalog.

Pure decision helpers; they hold no state and perform no I/O.
"""

from .refresh import RefreshPolicy, should_fetch

__all__ = ["RefreshPolicy", "should_fetch"]
