"""
Rendering - Flet controls for the annotation overlay.
"""

from .overlay import annotation_control, annotation_controls, creation_menu, selection_control

__all__ = ["annotation_control", "annotation_controls", "creation_menu", "selection_control"]
