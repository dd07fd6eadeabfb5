"""
Proof Verifier

Recomputes roots from leaves and proofs. Verification needs only the leaf
bytes, the proof and the expected root, never a tree instance.

The boolean entry points never raise on malformed or forged input; they
return False so that a bad proof cannot be mistaken for a passing one.
"""

import logging

from hash_engine import HashEngine
from merkle_config import get_merkle_config
from merkle_errors import MalformedProofError
from proof_types import MultiProof, Proof, is_digest

logger = logging.getLogger(__name__)


def configured_engine(hash_engine=None):
    """The given engine, or the one for the globally configured hash scheme."""
    if hash_engine is not None:
        return hash_engine
    return HashEngine.for_scheme(get_merkle_config().hash_scheme)


def process_proof(leaf_bytes, proof, hash_engine=None):
    """Fold a single proof into the root it implies."""
    hash_engine = configured_engine(hash_engine)
    siblings = proof.siblings if isinstance(proof, Proof) else proof
    computed_hash = hash_engine.leaf_digest(leaf_bytes)
    for proof_element in siblings:
        if not is_digest(proof_element):
            raise MalformedProofError(f"Proof element is not a 32-byte digest: {proof_element!r}")
        computed_hash = hash_engine.node_digest(computed_hash, proof_element)
    return computed_hash


def verify_proof(leaf_bytes, leaf_index, proof, expected_root, hash_engine=None):
    """
    Check a single inclusion proof.

    Siblings are paired by value, so no left/right bookkeeping is needed;
    leaf_index is only checked for consistency with the proof.
    """
    hash_engine = configured_engine(hash_engine)
    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int) or leaf_index < 0:
        return False
    if isinstance(proof, Proof) and proof.leaf_index != leaf_index:
        return False
    if not is_digest(expected_root) or not isinstance(leaf_bytes, (bytes, bytearray)):
        return False
    try:
        return process_proof(bytes(leaf_bytes), proof, hash_engine) == expected_root
    except (MalformedProofError, TypeError) as e:
        logger.debug("Rejected malformed proof for leaf %d: %s", leaf_index, e)
        return False


def _sorted_leaf_digests(leaves, indices, leaf_count, hash_engine):
    if len(leaves) != len(indices):
        raise MalformedProofError(f"Got {len(leaves)} leaves for {len(indices)} indices")
    if not leaves:
        raise MalformedProofError("Multiproof covers zero leaves")
    known = {}
    for leaf, index in zip(leaves, indices):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < leaf_count:
            raise MalformedProofError(f"Leaf index {index!r} outside tree of {leaf_count} leaves")
        if index in known:
            raise MalformedProofError(f"Duplicate leaf index {index}")
        if not isinstance(leaf, (bytes, bytearray)):
            raise MalformedProofError(f"Leaf at index {index} is not bytes")
        known[index] = hash_engine.leaf_digest(bytes(leaf))
    return sorted(known.items())


def process_multiproof(leaves, indices, multiproof: MultiProof, hash_engine=None):
    """
    Replay a multiproof and return the root it implies.

    Known nodes are walked layer by layer in position order; every pairing
    consumes one flag, and a False flag also consumes the next proof digest.
    Raises MalformedProofError when the flags, digests and leaves do not fit.
    """
    hash_engine = configured_engine(hash_engine)
    proof = multiproof.proof_digests
    proof_flags = multiproof.proof_flags
    leaf_count = multiproof.leaf_count

    if isinstance(leaf_count, bool) or not isinstance(leaf_count, int) or leaf_count < 1:
        raise MalformedProofError(f"Invalid leaf count {leaf_count!r}")
    if len(proof_flags) != len(leaves) + len(proof) - 1:
        raise MalformedProofError(
            f"{len(leaves)} leaves and {len(proof)} proof digests require "
            f"{len(leaves) + len(proof) - 1} flags, got {len(proof_flags)}")
    if not all(is_digest(p) for p in proof):
        raise MalformedProofError("Proof digests must be 32 bytes each")

    known = _sorted_leaf_digests(leaves, indices, leaf_count, hash_engine)
    flag_pos, proof_pos = 0, 0
    layer_len = leaf_count

    while layer_len > 1:
        next_known = []
        i = 0
        while i < len(known):
            position, digest = known[i]
            sibling = position ^ 1
            if sibling >= layer_len:
                next_known.append((position >> 1, digest))
                i += 1
                continue

            if flag_pos >= len(proof_flags):
                raise MalformedProofError("Ran out of proof flags")
            sibling_known = i + 1 < len(known) and known[i + 1][0] == sibling
            if proof_flags[flag_pos]:
                if not sibling_known:
                    raise MalformedProofError(f"Flag {flag_pos} pairs node {position} with an unknown sibling")
                other = known[i + 1][1]
                i += 2
            else:
                if sibling_known:
                    raise MalformedProofError(f"Flag {flag_pos} requests a proof digest for a known sibling")
                if proof_pos >= len(proof):
                    raise MalformedProofError("Ran out of proof digests")
                other = proof[proof_pos]
                proof_pos += 1
                i += 1
            flag_pos += 1
            next_known.append((position >> 1, hash_engine.node_digest(digest, other)))

        known = next_known
        layer_len = (layer_len + 1) // 2

    if flag_pos != len(proof_flags) or proof_pos != len(proof):
        raise MalformedProofError("Multiproof has unused flags or digests")
    return known[0][1]


def verify_multiproof(leaves, indices, multiproof, expected_root, hash_engine=None):
    """Check a multiproof; leaves and indices are matched pairwise."""
    hash_engine = configured_engine(hash_engine)
    if not isinstance(multiproof, MultiProof) or not is_digest(expected_root):
        return False
    try:
        reconstructed_root = process_multiproof(list(leaves), list(indices), multiproof, hash_engine)
    except (MalformedProofError, TypeError) as e:
        logger.debug("Rejected malformed multiproof: %s", e)
        return False
    return reconstructed_root == expected_root
