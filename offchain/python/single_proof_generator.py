"""
Single Proof Generator

Walks the layered tree from one leaf to the root and collects the sibling
at every layer. A node without a sibling (the last node of an odd-length
layer) is promoted unchanged, so that layer contributes nothing.
"""

from merkle_errors import IndexOutOfRangeError
from proof_types import Proof


def check_leaf_index(leaf_index, leaf_count):
    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
        raise IndexOutOfRangeError(leaf_index, leaf_count)
    if leaf_index < 0 or leaf_index >= leaf_count:
        raise IndexOutOfRangeError(leaf_index, leaf_count)


def generate_proof(layers, leaf_index):
    """
    Generate the inclusion proof for one leaf.

    Args:
        layers: Tree layers (leaf digests, level1, ..., root)
        leaf_index: Position of the leaf in the bottom layer

    Returns:
        Proof with one sibling per layer that has one
    """
    check_leaf_index(leaf_index, len(layers[0]))

    siblings = []
    position = leaf_index
    for layer in layers[:-1]:  # Exclude root layer
        sibling_position = position ^ 1
        if sibling_position < len(layer):
            siblings.append(layer[sibling_position])
        position >>= 1

    return Proof(leaf_index, tuple(siblings))
