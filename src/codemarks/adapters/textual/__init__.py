"""Textual host adapter; ``app`` is only importable with Textual installed."""

from .controller import TextualMarksAdapter, TextualUIHooks, render_decorations

__all__ = ["TextualMarksAdapter", "TextualUIHooks", "render_decorations"]
