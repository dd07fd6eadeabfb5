"""
Hash Engine

Domain-separated hashing for leaves and internal nodes. Internal nodes are
hashed over their two children ordered by value, so the pairing is
commutative and matches the order-insensitive rule used by the verifier
contract (OpenZeppelin's commutativeKeccak256).
"""

from typing import Final, Optional, Protocol, TypeAlias

from eth_utils import keccak

from merkle_config import HashScheme

Digest: TypeAlias = bytes

DIGEST_SIZE: Final = 32
LEAF_PREFIX: Final = b'\x00'
NODE_PREFIX: Final = b'\x01'


class HashFunction(Protocol):
    """Capability wrapping a hash primitive producing 32-byte digests."""

    def hash(self, data: bytes) -> Digest: ...


class Keccak256:
    """Keccak256 as used by the EVM."""

    def hash(self, data: bytes) -> Digest:
        return keccak(data)

    def __repr__(self):
        return "Keccak256()"


class HashEngine:
    """Stateless leaf/node hashing. Safe to share between threads."""

    def __init__(self, hash_function: Optional[HashFunction] = None, leaf_prefix: bytes = LEAF_PREFIX,
                 node_prefix: bytes = NODE_PREFIX):
        self.hash_function = hash_function if hash_function is not None else Keccak256()
        self.leaf_prefix = bytes(leaf_prefix)
        self.node_prefix = bytes(node_prefix)
        if self.leaf_prefix and self.leaf_prefix == self.node_prefix:
            raise ValueError("Leaf and node prefixes must differ")

    @classmethod
    def for_scheme(cls, scheme: HashScheme, hash_function: Optional[HashFunction] = None) -> "HashEngine":
        if scheme is HashScheme.OPENZEPPELIN:
            return cls(hash_function, leaf_prefix=b'', node_prefix=b'')
        return cls(hash_function)

    def leaf_digest(self, data: bytes) -> Digest:
        return self.hash_function.hash(self.leaf_prefix + bytes(data))

    def node_digest(self, a: Digest, b: Digest) -> Digest:
        # bytes compare as unsigned lexicographic sequences
        low, high = (a, b) if a < b else (b, a)
        return self.hash_function.hash(self.node_prefix + low + high)

    def __eq__(self, other):
        return (isinstance(other, HashEngine)
                and type(self.hash_function) is type(other.hash_function)
                and self.leaf_prefix == other.leaf_prefix
                and self.node_prefix == other.node_prefix)

    def __hash__(self):
        return hash((type(self.hash_function), self.leaf_prefix, self.node_prefix))

    def __repr__(self):
        return f"HashEngine({self.hash_function!r}, leaf_prefix=0x{self.leaf_prefix.hex()}, node_prefix=0x{self.node_prefix.hex()})"


DEFAULT_ENGINE: Final = HashEngine()


def combine_and_hash(hash1_hex, hash2_hex, engine=DEFAULT_ENGINE):
    """Combine two hex digests (with or without 0x) into their parent's hex digest."""
    h1_bytes = bytes.fromhex(hash1_hex.removeprefix('0x'))
    h2_bytes = bytes.fromhex(hash2_hex.removeprefix('0x'))
    return engine.node_digest(h1_bytes, h2_bytes).hex()
