#!/usr/bin/env python3
"""
Multiproof Generator

Builds one compact proof for several leaves using the flag-driven format of
OpenZeppelin's multiProofVerify, adapted to trees that promote the last node
of an odd-length layer instead of duplicating it.

Every combination step emits one flag:
    True  -> both children are already known (requested leaves or nodes
             rebuilt from them), no proof digest needed
    False -> one child is known, the other is the next proof digest
A promoted node emits nothing. The result satisfies
len(proof_flags) == len(leaves) + len(proof) - 1.
"""

import logging

from merkle_errors import EmptyRequestError
from proof_types import MultiProof
from single_proof_generator import check_leaf_index

logger = logging.getLogger(__name__)


def normalize_indices(leaf_indices, leaf_count):
    """Validate the requested indices and return them sorted and distinct."""
    indices = set()
    for index in leaf_indices:
        check_leaf_index(index, leaf_count)
        indices.add(index)
    if not indices:
        raise EmptyRequestError("Multiproof requested for zero leaves")
    return sorted(indices)


def generate_multiproof(layers, leaf_indices):
    """
    Generate a multiproof for the given leaf indices.

    Args:
        layers: Tree layers (leaf digests, level1, ..., root)
        leaf_indices: Iterable of leaf positions to prove

    Returns:
        MultiProof whose leaf_indices are sorted; verifiers expect the leaves
        in that same order
    """
    sorted_indices = normalize_indices(leaf_indices, len(layers[0]))

    proof = []
    proof_flags = []
    known = sorted_indices

    # Process each layer bottom-up, left to right
    for layer in layers[:-1]:
        next_known = []
        i = 0
        while i < len(known):
            position = known[i]
            sibling = position ^ 1
            if i + 1 < len(known) and known[i + 1] == sibling:
                # Both children known - no proof needed
                proof_flags.append(True)
                i += 2
            elif sibling < len(layer):
                proof.append(layer[sibling])
                proof_flags.append(False)
                i += 1
            else:
                # Promoted unchanged
                i += 1
            next_known.append(position >> 1)
        known = next_known

    logger.debug("Multiproof for %d leaves: %d digests, %d flags",
                 len(sorted_indices), len(proof), len(proof_flags))

    return MultiProof(
        leaf_indices=tuple(sorted_indices),
        proof_digests=tuple(proof),
        proof_flags=tuple(proof_flags),
        leaf_count=len(layers[0]),
    )
