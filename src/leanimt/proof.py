"""
Merkle Proofs for LeanIMT

A proof is the list of siblings along a leaf's path, one entry per level from
the leaf level upward. Levels where the path node has no sibling (the lean
pass-through levels) hold None and cost nothing to verify.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from .hashing import HashFunction


def compute_root(
    leaf: Any,
    index: int,
    siblings: Sequence[Optional[Any]],
    hash_fn: HashFunction,
) -> Any:
    """
    Fold a leaf and its siblings up to a root.

    Args:
        leaf: Leaf value at the bottom of the path
        index: Leaf index; bit l selects the side at level l
        siblings: One entry per level, None for pass-through levels
        hash_fn: Pair combiner

    Returns:
        The root implied by the path
    """
    node = leaf
    for level, sibling in enumerate(siblings):
        if sibling is None:
            continue
        if (index >> level) & 1:
            node = hash_fn(sibling, node)
        else:
            node = hash_fn(node, sibling)
    return node


@dataclass
class MerkleProof:
    """Inclusion proof for a single leaf."""
    root: Any
    leaf: Any
    index: int
    siblings: List[Optional[Any]] = field(default_factory=list)

    def verify(self, hash_fn: HashFunction) -> bool:
        """Verify this proof against its own root."""
        if self.index < 0 or self.index >> len(self.siblings):
            return False
        return compute_root(self.leaf, self.index, self.siblings, hash_fn) == self.root

    def to_dict(self) -> dict:
        return {
            'root': self.root,
            'leaf': self.leaf,
            'index': self.index,
            'siblings': list(self.siblings),
        }


def verify_proof(proof: MerkleProof, hash_fn: HashFunction) -> bool:
    """Verify an inclusion proof without access to the tree."""
    return proof.verify(hash_fn)
