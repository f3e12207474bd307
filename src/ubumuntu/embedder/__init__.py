# src/ubumuntu/embedder/__init__.py
"""Embedding functionality for Ubumuntu."""

from ubumuntu.embedder.base import Embedder
from ubumuntu.embedder.client import ClientEmbedder

__all__ = ["Embedder", "ClientEmbedder"]
