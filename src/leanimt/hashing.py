"""
Hash Combiners for LeanIMT

The tree is hash-agnostic: every instance is built with a caller-supplied
function combining an ordered (left, right) pair of nodes into one node.

The combiners here are conveniences for bytes-valued trees. They are never
used implicitly.
"""

from enum import IntEnum
from typing import Any, Callable
import hashlib


HashFunction = Callable[[Any, Any], Any]
"""(left, right) -> parent. Must be deterministic and side-effect-free."""


class HashTag(IntEnum):
    """Domain separation tags for node hashing."""

    NODE = 0x21        # Internal node
    LEAF = 0x20        # Leaf pre-image


def tag_bytes(tag: HashTag) -> bytes:
    """Two-byte big-endian prefix; keeps leaf and node pre-images disjoint."""
    return tag.to_bytes(2, 'big')


def _digest(tag: HashTag, *parts: bytes) -> bytes:
    """
    32-byte SHAKE256 digest of tag ‖ (len ‖ part)*.

    Every part carries an 8-byte length, so (b"ab", b"c") and
    (b"a", b"bc") never share a pre-image.
    """
    xof = hashlib.shake_256(tag_bytes(tag))
    for part in parts:
        xof.update(len(part).to_bytes(8, 'big') + part)
    return xof.digest(32)


def shake256_combiner(left: bytes, right: bytes) -> bytes:
    """Hash an internal node: H(NODE ‖ left ‖ right)"""
    return _digest(HashTag.NODE, left, right)


def shake256_leaf(data: bytes) -> bytes:
    """Hash application data into a 32-byte leaf: H(LEAF ‖ data)"""
    return _digest(HashTag.LEAF, data)


def sha256_combiner(left: bytes, right: bytes) -> bytes:
    """Plain SHA-256 over the concatenated children."""
    return hashlib.sha256(left + right).digest()
