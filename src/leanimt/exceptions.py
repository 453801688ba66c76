"""
Exceptions for LeanIMT

Every error raised by the tree derives from LeanIMTError. Errors raised by
the caller-supplied hash function are never wrapped; they propagate as-is.
"""


class LeanIMTError(Exception):
    """Base exception for all tree errors."""
    pass


class EmptyBatchError(LeanIMTError, ValueError):
    """Raised when insert_many is called with no leaves."""
    pass


class DuplicateLeafError(LeanIMTError, ValueError):
    """Raised when a leaf value is already present in the tree."""
    pass


class InvalidLeafError(LeanIMTError, ValueError):
    """Raised when a leaf equals the reserved tombstone value."""
    pass


class LeafNotFoundError(LeanIMTError, KeyError):
    """Raised when an update/remove/lookup target is not in the tree."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class InvalidProofError(LeanIMTError):
    """Raised when sibling nodes do not reproduce the current root."""
    pass


class InvalidProofLengthError(InvalidProofError, ValueError):
    """Raised when a sibling sequence does not cover exactly the tree depth."""
    pass


class EmptyHashResultError(LeanIMTError):
    """Raised when the hash function returns None."""
    pass
