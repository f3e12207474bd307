# src/ubumuntu/configuration/storage/__init__.py
"""Storage configurations for Ubumuntu."""

from ubumuntu.configuration.storage.local import LocalStorage

__all__ = ["LocalStorage"]
