"""
Lean Incremental Merkle Tree

Binary Merkle tree that grows by appending leaves and never pads:
a node without a right sibling is carried up to the next level unchanged
instead of being hashed with a zero value.

    levels[0]      leaves, in insertion order
    levels[l+1][i] = H(levels[l][2i], levels[l][2i+1])   if 2i+1 exists
                   = levels[l][2i]                         otherwise
    levels[depth]  [root]

Supports:
- O(depth) single insertion
- Batch insertion touching each affected node once
- Proof-checked update and removal (removal writes a tombstone)
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from .config import LeanIMTConfig
from .exceptions import (
    DuplicateLeafError,
    EmptyBatchError,
    EmptyHashResultError,
    InvalidLeafError,
    InvalidProofError,
    InvalidProofLengthError,
    LeafNotFoundError,
)
from .hashing import HashFunction
from .proof import MerkleProof, compute_root


logger = logging.getLogger(__name__)

# (level, start index, nodes): levels[level][start:] is replaced by nodes
_Write = Tuple[int, int, List[Any]]


def depth_for_size(size: int) -> int:
    """ceil(log2(size)) for size > 1, else 0."""
    if size <= 1:
        return 0
    return (size - 1).bit_length()


class LeanIMT:
    """
    Lean incremental Merkle tree over opaque, hashable node values.

    Mutations are not thread-safe; callers must serialize them.
    Reads may run concurrently with each other but not with a mutation.
    """

    def __init__(self, hash_fn: HashFunction, config: Optional[LeanIMTConfig] = None):
        """
        Create an empty tree.

        Args:
            hash_fn: Pair combiner (left, right) -> parent
            config: Tree parameters (defaults if None)
        """
        if not callable(hash_fn):
            raise TypeError(f"hash_fn must be callable, got {type(hash_fn).__name__}")

        self.hash_fn = hash_fn
        self.config = config or LeanIMTConfig()

        self._levels: List[List[Any]] = [[]]
        self._leaves: Dict[Any, int] = {}
        self._depth = 0

    # =========================================================================
    # Query surface
    # =========================================================================

    @property
    def root(self) -> Optional[Any]:
        """Current root, or None for an empty tree."""
        if not self._levels[0]:
            return None
        return self._levels[self._depth][0]

    @property
    def size(self) -> int:
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        return self._depth

    def get_size(self) -> int:
        return self.size

    def get_depth(self) -> int:
        return self._depth

    def has(self, leaf: Any) -> bool:
        """Check if a (non-removed) leaf is in the tree."""
        return leaf in self._leaves

    def index_of(self, leaf: Any) -> int:
        """Return the slot index of a leaf."""
        try:
            return self._leaves[leaf]
        except KeyError:
            raise LeafNotFoundError(f"Leaf does not exist: {leaf!r}") from None

    @property
    def leaves(self) -> List[Any]:
        """Copy of the leaf level, tombstones included."""
        return list(self._levels[0])

    @property
    def levels(self) -> List[List[Any]]:
        """Copy of every level, leaves first."""
        return [list(level) for level in self._levels]

    def get_leaves(self) -> Dict[Any, int]:
        """Copy of the leaf -> index map."""
        return dict(self._leaves)

    def generate_proof(self, leaf: Any) -> List[Optional[Any]]:
        """
        Sibling path for a leaf, as expected by update() and remove().

        Returns:
            One entry per level (len == depth); None where the path node
            has no sibling
        """
        return self.generate_proof_at(self.index_of(leaf))

    def generate_proof_at(self, index: int) -> List[Optional[Any]]:
        """Sibling path for the slot at index (tombstoned slots included)."""
        if index < 0 or index >= self.size:
            raise IndexError(f"Index {index} out of range [0, {self.size})")

        siblings: List[Optional[Any]] = []
        for level in range(self._depth):
            nodes = self._levels[level]
            sibling_index = index ^ 1
            siblings.append(nodes[sibling_index] if sibling_index < len(nodes) else None)
            index >>= 1

        return siblings

    def create_merkle_proof(self, leaf: Any) -> MerkleProof:
        """Bundle a leaf's path with the current root."""
        index = self.index_of(leaf)
        return MerkleProof(
            root=self.root,
            leaf=leaf,
            index=index,
            siblings=self.generate_proof_at(index),
        )

    # =========================================================================
    # Insertion
    # =========================================================================

    def insert(self, leaf: Any) -> Any:
        """
        Append a leaf and return the new root.

        Raises:
            InvalidLeafError: leaf is None or the tombstone value
            DuplicateLeafError: leaf already present
        """
        self._check_new_leaf(leaf)

        index = self.size
        depth = max(self._depth, depth_for_size(index + 1))

        writes: List[_Write] = [(0, index, [leaf])]
        node = leaf

        for level in range(depth):
            # The new node is always the last one on its level,
            # so it only ever has a left sibling
            if index & 1:
                node = self._hash(self._levels[level][index - 1], node)
            index >>= 1
            writes.append((level + 1, index, [node]))

        self._commit(writes, depth)
        self._leaves[leaf] = self.size - 1

        logger.debug(f"Inserted leaf at index {self.size - 1} (size={self.size}, depth={depth})")
        return node

    def insert_many(self, leaves: Iterable[Any]) -> Any:
        """
        Append a batch of leaves and return the new root.

        Each level is rebuilt once, from the first index whose subtree
        holds a new leaf. The result equals inserting the leaves one by one.

        Raises:
            EmptyBatchError: no leaves given
            InvalidLeafError: a leaf is None or the tombstone value
            DuplicateLeafError: a leaf is already present or repeated
        """
        leaves = list(leaves)
        if not leaves:
            raise EmptyBatchError("Cannot insert an empty batch of leaves")

        seen = set()
        for leaf in leaves:
            self._check_new_leaf(leaf)
            if leaf in seen:
                raise DuplicateLeafError(f"Leaf repeated in batch: {leaf!r}")
            seen.add(leaf)

        old_size = self.size
        new_size = old_size + len(leaves)
        depth = max(self._depth, depth_for_size(new_size))

        writes: List[_Write] = []
        start = old_size
        current = leaves

        for level in range(depth):
            writes.append((level, start, current))

            level_size = start + len(current)
            next_start = start >> 1
            next_size = ((level_size - 1) >> 1) + 1

            next_nodes = []
            for i in range(next_start, next_size):
                left_index = 2 * i
                right_index = left_index + 1

                if left_index >= start:
                    left = current[left_index - start]
                else:
                    left = self._levels[level][left_index]

                # right_index >= start always holds here
                if right_index < level_size:
                    next_nodes.append(self._hash(left, current[right_index - start]))
                else:
                    next_nodes.append(left)

            start = next_start
            current = next_nodes

        writes.append((depth, start, current))
        self._commit(writes, depth)

        for offset, leaf in enumerate(leaves):
            self._leaves[leaf] = old_size + offset

        logger.debug(
            f"Inserted batch of {len(leaves)} leaves at [{old_size}, {new_size}) "
            f"(depth {self._depth})"
        )
        return current[0]

    # =========================================================================
    # Update / removal
    # =========================================================================

    def update(self, old_leaf: Any, new_leaf: Any, sibling_nodes: Sequence[Optional[Any]]) -> Any:
        """
        Replace a leaf, checking the caller's proof against the live root.

        Args:
            old_leaf: Current value of the leaf
            new_leaf: Replacement value
            sibling_nodes: Path from generate_proof(old_leaf)

        Returns:
            The new root

        Raises:
            LeafNotFoundError: old_leaf not in the tree
            InvalidLeafError: new_leaf is None or the tombstone value
            DuplicateLeafError: new_leaf already present at another index
            InvalidProofLengthError: len(sibling_nodes) != depth
            InvalidProofError: proof malformed or stale
        """
        if new_leaf is None:
            raise InvalidLeafError("New leaf cannot be None")
        if self.config.is_tombstone(new_leaf):
            raise InvalidLeafError("New leaf cannot be the tombstone value; use remove()")
        return self._replace(old_leaf, new_leaf, sibling_nodes)

    def remove(self, leaf: Any, sibling_nodes: Sequence[Optional[Any]]) -> Any:
        """
        Tombstone a leaf. Size and depth are unchanged.

        Raises the same proof errors as update().
        """
        return self._replace(leaf, self.config.tombstone, sibling_nodes)

    def _replace(self, old_leaf: Any, new_leaf: Any, sibling_nodes: Sequence[Optional[Any]]) -> Any:
        index = self.index_of(old_leaf)

        removing = self.config.is_tombstone(new_leaf)
        if not removing and new_leaf != old_leaf and new_leaf in self._leaves:
            raise DuplicateLeafError(f"New leaf already exists: {new_leaf!r}")

        sibling_nodes = list(sibling_nodes)
        if len(sibling_nodes) != self._depth:
            raise InvalidProofLengthError(
                f"Expected {self._depth} sibling nodes, got {len(sibling_nodes)}"
            )

        self._verify_path(old_leaf, index, sibling_nodes)

        writes: List[_Write] = [(0, index, [new_leaf])]
        node = new_leaf
        position = index

        for level in range(self._depth):
            nodes = self._levels[level]
            sibling_index = position ^ 1
            if sibling_index < len(nodes):
                if position & 1:
                    node = self._hash(nodes[sibling_index], node)
                else:
                    node = self._hash(node, nodes[sibling_index])
            position >>= 1
            writes.append((level + 1, position, [node]))

        self._commit(writes, self._depth)

        del self._leaves[old_leaf]
        if not removing:
            self._leaves[new_leaf] = index

        logger.debug(f"{'Removed' if removing else 'Updated'} leaf at index {index}")
        return node

    def _verify_path(self, leaf: Any, index: int, sibling_nodes: List[Optional[Any]]) -> None:
        """Check proof shape against the live tree, then its root."""
        position = index
        for level, sibling in enumerate(sibling_nodes):
            has_sibling = (position ^ 1) < len(self._levels[level])
            if has_sibling and sibling is None:
                raise InvalidProofError(f"Missing sibling node at level {level}")
            if not has_sibling and sibling is not None:
                raise InvalidProofError(f"Unexpected sibling node at level {level}")
            position >>= 1

        if compute_root(leaf, index, sibling_nodes, self._hash) != self.root:
            logger.warning(f"Rejected stale or forged proof for leaf at index {index}")
            raise InvalidProofError("Wrong sibling nodes")

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_new_leaf(self, leaf: Any) -> None:
        # None marks a missing sibling in proofs
        if leaf is None:
            raise InvalidLeafError("Leaf cannot be None")
        if self.config.is_tombstone(leaf):
            raise InvalidLeafError(f"Leaf cannot be the tombstone value {self.config.tombstone!r}")
        if leaf in self._leaves:
            raise DuplicateLeafError(f"Leaf already exists: {leaf!r}")

    def _hash(self, left: Any, right: Any) -> Any:
        result = self.hash_fn(left, right)
        if result is None:
            raise EmptyHashResultError("Hash function returned None")
        return result

    def _commit(self, writes: List[_Write], depth: int) -> None:
        """Apply staged node writes; nothing is mutated before this point."""
        while len(self._levels) <= depth:
            self._levels.append([])

        for level, start, nodes in writes:
            self._levels[level][start:start + len(nodes)] = nodes

        self._depth = depth

    def __repr__(self) -> str:
        return f"LeanIMT(size={self.size}, depth={self._depth}, root={self.root!r})"
