"""
Proof Data Structures

Value types handed from the proof generators to verifiers, plus the forms
they take on the wire (concatenated bytes32 words) and in JSON files.
"""

from dataclasses import dataclass, field
from typing import Any

from eth_utils import decode_hex, encode_hex

from hash_engine import DIGEST_SIZE, Digest
from merkle_errors import MalformedProofError


def digest_to_hex(digest: Digest) -> str:
    return encode_hex(digest)


def hex_to_digest(value: str) -> Digest:
    """Parse a 0x-prefixed (or bare) hex string into a 32-byte digest."""
    try:
        digest = decode_hex(value)
    except (ValueError, TypeError) as e:
        raise MalformedProofError(f"Invalid hex digest {value!r}: {e}") from e
    if len(digest) != DIGEST_SIZE:
        raise MalformedProofError(f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}")
    return digest


def is_digest(value) -> bool:
    return isinstance(value, bytes) and len(value) == DIGEST_SIZE


def split_digests(blob: bytes) -> tuple[Digest, ...]:
    if len(blob) % DIGEST_SIZE != 0:
        raise MalformedProofError(f"Proof length {len(blob)} is not a multiple of {DIGEST_SIZE}")
    return tuple(blob[i:i + DIGEST_SIZE] for i in range(0, len(blob), DIGEST_SIZE))


@dataclass(frozen=True)
class Proof:
    """Sibling digests from a leaf up to the root, in consumption order."""
    leaf_index: int
    siblings: tuple[Digest, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'siblings', tuple(self.siblings))

    def __len__(self):
        return len(self.siblings)

    def __iter__(self):
        return iter(self.siblings)

    def to_bytes(self) -> bytes:
        return b''.join(self.siblings)

    @classmethod
    def from_bytes(cls, leaf_index: int, blob: bytes) -> "Proof":
        return cls(leaf_index, split_digests(blob))

    def to_hex_list(self) -> list[str]:
        """bytes32[] argument for a contract call."""
        return [digest_to_hex(d) for d in self.siblings]

    def to_dict(self) -> dict[str, Any]:
        return {
            'leaf_index': self.leaf_index,
            'proof': self.to_hex_list(),
            'proof_size_bytes': len(self.siblings) * DIGEST_SIZE,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Proof":
        try:
            return cls(int(data['leaf_index']), tuple(hex_to_digest(h) for h in data['proof']))
        except (KeyError, TypeError) as e:
            raise MalformedProofError(f"Invalid proof document: {e}") from e


@dataclass(frozen=True)
class MultiProof:
    """
    Shared proof for several leaves.

    proof_flags has exactly len(leaf_indices) - 1 + len(proof_digests)
    entries: True combines two already-known values, False combines a known
    value with the next entry of proof_digests. leaf_count is the width of
    the tree's bottom layer, which tells the verifier where odd layers
    promote their last node.
    """
    leaf_indices: tuple[int, ...]
    proof_digests: tuple[Digest, ...]
    proof_flags: tuple[bool, ...]
    leaf_count: int

    def __post_init__(self):
        object.__setattr__(self, 'leaf_indices', tuple(self.leaf_indices))
        object.__setattr__(self, 'proof_digests', tuple(self.proof_digests))
        object.__setattr__(self, 'proof_flags', tuple(bool(f) for f in self.proof_flags))

    @property
    def expected_flag_count(self) -> int:
        return len(self.leaf_indices) - 1 + len(self.proof_digests)

    def to_bytes(self) -> bytes:
        return b''.join(self.proof_digests)

    def to_hex_list(self) -> list[str]:
        return [digest_to_hex(d) for d in self.proof_digests]

    def to_dict(self) -> dict[str, Any]:
        return {
            'leaf_indices': list(self.leaf_indices),
            'leaf_count': self.leaf_count,
            'proof': self.to_hex_list(),
            'proof_flags': list(self.proof_flags),
            'proof_size_bytes': len(self.proof_digests) * DIGEST_SIZE,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultiProof":
        try:
            flags = data['proof_flags']
            if not all(isinstance(f, bool) for f in flags):
                raise MalformedProofError("proof_flags must be booleans")
            return cls(
                leaf_indices=tuple(int(i) for i in data['leaf_indices']),
                proof_digests=tuple(hex_to_digest(h) for h in data['proof']),
                proof_flags=tuple(flags),
                leaf_count=int(data['leaf_count']),
            )
        except (KeyError, TypeError) as e:
            raise MalformedProofError(f"Invalid multiproof document: {e}") from e
