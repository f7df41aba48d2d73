"""
User interaction handlers - rectangle selection.
"""

from .selection import MENU_OFFSET, SelectionEngine

__all__ = ["SelectionEngine", "MENU_OFFSET"]
