"""
Merkle Tree Error Kinds

All errors are raised to the caller and are never retried: every operation
is a deterministic computation over in-memory data.
"""


class MerkleTreeError(ValueError):
    """Base class for every error raised by the off-chain Merkle tooling."""


class EmptyInputError(MerkleTreeError):
    """A tree was requested over zero leaves (the root is undefined)."""


class IndexOutOfRangeError(MerkleTreeError, IndexError):
    """A proof was requested for a leaf position that does not exist."""

    def __init__(self, index, leaf_count):
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(f"Leaf index {index!r} out of range for tree with {leaf_count} leaves")


class EmptyRequestError(MerkleTreeError):
    """A multiproof was requested for zero leaf indices."""


class MalformedProofError(MerkleTreeError):
    """Proof, flag and leaf counts do not fit together."""


class OnChainVerificationError(MerkleTreeError):
    """The verifier contract call failed or returned an unexpected value."""
