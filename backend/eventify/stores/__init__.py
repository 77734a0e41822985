"""
Storage layer - swappable persistence behind one interface.
"""

from .interfaces import Storage
from .memory_store import MemoryStorage

__all__ = ['Storage', 'MemoryStorage']
