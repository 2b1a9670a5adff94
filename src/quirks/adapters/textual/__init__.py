"""Textual host for the editor core."""

from .controller import TextualEditorAdapter, TextualUIHooks, translate_key

__all__ = ["TextualEditorAdapter", "TextualUIHooks", "translate_key"]
