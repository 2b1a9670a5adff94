"""Host adapters that drive an :class:`~quirks.editor.Editor`."""
