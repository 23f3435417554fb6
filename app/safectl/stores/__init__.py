"""Configuration stores.

This module exports the Store interface and the store factory. Backends
are imported from their own modules.
"""

from safectl.stores.base import Store
from safectl.stores.factory import StoreSettings, get_store, parse_provider

__all__ = ["Store", "StoreSettings", "get_store", "parse_provider"]
