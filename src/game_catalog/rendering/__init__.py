"""Markdown rendering of resolved games."""

from game_catalog.rendering.markdown import MarkdownRenderer, NoteData, sanitize_filename

__all__ = [
    "MarkdownRenderer",
    "NoteData",
    "sanitize_filename",
]
