"""Exception types raised by core operations.

Both concrete errors subclass the builtin exception a caller would already
expect (``ValueError`` for bad input, ``FileNotFoundError`` for missing
documents) so existing ``except`` clauses keep working.
"""


class CortexError(Exception):
    """Base class for errors raised by obsidian_cortex."""


class InvalidPathError(CortexError, ValueError):
    """A user-supplied path is absolute or escapes the vault root."""


class NoteNotFoundError(CortexError, FileNotFoundError):
    """A document or scope directory does not exist inside the vault."""
