"""
LeanIMT: Lean Incremental Merkle Tree

An append-biased binary Merkle tree with no padding: a node without a
sibling is carried up unchanged. Leaves are opaque values combined by a
caller-supplied pair hash.

Usage:
    from leanimt import LeanIMT

    tree = LeanIMT(lambda a, b: f"{a},{b}")
    tree.insert("leaf1")
    tree.insert_many(["leaf2", "leaf3"])

    proof = tree.generate_proof("leaf3")
    tree.update("leaf3", "leaf3x", proof)

    # Bytes-valued tree with a domain-separated combiner
    from leanimt import shake256_combiner
    tree = LeanIMT(shake256_combiner, LeanIMTConfig(tombstone=bytes(32)))
"""

from .config import LeanIMTConfig, DEFAULT_TOMBSTONE
from .exceptions import (
    LeanIMTError,
    EmptyBatchError,
    DuplicateLeafError,
    InvalidLeafError,
    LeafNotFoundError,
    InvalidProofLengthError,
    InvalidProofError,
    EmptyHashResultError,
)
from .hashing import (
    HashFunction,
    HashTag,
    shake256_combiner,
    shake256_leaf,
    sha256_combiner,
)
from .proof import MerkleProof, compute_root, verify_proof
from .tree import LeanIMT, depth_for_size

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Tree
    "LeanIMT",
    "depth_for_size",
    # Config
    "LeanIMTConfig",
    "DEFAULT_TOMBSTONE",
    # Proofs
    "MerkleProof",
    "compute_root",
    "verify_proof",
    # Hashing
    "HashFunction",
    "HashTag",
    "shake256_combiner",
    "shake256_leaf",
    "sha256_combiner",
    # Exceptions
    "LeanIMTError",
    "EmptyBatchError",
    "DuplicateLeafError",
    "InvalidLeafError",
    "LeafNotFoundError",
    "InvalidProofLengthError",
    "InvalidProofError",
    "EmptyHashResultError",
]
