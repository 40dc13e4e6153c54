"""Interaction layer: gestures to controller intents."""

from .surface import ContextMenu, InteractionSurface, MenuKind

__all__ = [
    "ContextMenu",
    "InteractionSurface",
    "MenuKind",
]
