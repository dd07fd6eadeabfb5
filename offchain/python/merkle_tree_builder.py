"""
Merkle Tree Builder

Flat, layered Merkle tree over caller-encoded leaves. Layer 0 holds the
leaf digests in input order; every layer above pairs adjacent nodes left to
right and promotes an unpaired last node unchanged. The finished tree is
immutable and can be shared between threads for proof generation.
"""

import concurrent.futures
import logging
import os

from hash_engine import HashEngine
from merkle_config import get_merkle_config
from merkle_errors import EmptyInputError
from multiproof_generator import generate_multiproof
from proof_types import digest_to_hex
from proof_verifier import verify_multiproof, verify_proof
from single_proof_generator import check_leaf_index, generate_proof

logger = logging.getLogger(__name__)


def _hash_pairs(nodes, start, stop, hash_engine):
    return [hash_engine.node_digest(nodes[i], nodes[i + 1]) for i in range(start, stop, 2)]


def next_layer(nodes, hash_engine, executor=None, chunk_pairs=None):
    """Derive the parent layer; an odd last node is promoted unchanged."""
    paired_end = len(nodes) - (len(nodes) % 2)

    if executor is None or not chunk_pairs:
        parents = _hash_pairs(nodes, 0, paired_end, hash_engine)
    else:
        # Pairs within one layer are independent; split them into chunks
        step = chunk_pairs * 2
        futures = [
            executor.submit(_hash_pairs, nodes, start, min(start + step, paired_end), hash_engine)
            for start in range(0, paired_end, step)
        ]
        parents = []
        for future in futures:
            parents.extend(future.result())

    if paired_end < len(nodes):
        parents.append(nodes[-1])
    return parents


def build_layers(leaf_digests, hash_engine, config=None):
    """Build every layer from the leaf digests up to the single root."""
    config = config or get_merkle_config()
    layers = [tuple(leaf_digests)]
    nodes = list(leaf_digests)

    executor = None
    workers = config.max_workers or min(32, (os.cpu_count() or 1) + 4)
    try:
        while len(nodes) > 1:
            pair_count = len(nodes) // 2
            chunk_pairs = None
            if pair_count >= config.parallel_threshold:
                if executor is None:
                    executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers)
                chunk_pairs = max(1, pair_count // workers)
            nodes = next_layer(nodes, hash_engine, executor if chunk_pairs else None, chunk_pairs)
            layers.append(tuple(nodes))
            if config.verbose_logging:
                logger.debug("Layer %d: %d nodes%s", len(layers) - 1, len(nodes),
                             " (parallel)" if chunk_pairs else "")
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    return tuple(layers)


def _check_leaves(leaves):
    checked = []
    for i, leaf in enumerate(leaves):
        if not isinstance(leaf, (bytes, bytearray, memoryview)):
            raise TypeError(f"Leaf {i} must be bytes, got {type(leaf).__name__}")
        checked.append(bytes(leaf))
    if not checked:
        raise EmptyInputError("Cannot build a Merkle tree without leaves")
    return checked


class MerkleTree:
    """Immutable layered Merkle tree. Use MerkleTree.build() to construct."""

    __slots__ = ('_layers', '_hash_engine', '_leaf_index')

    def __init__(self, layers, hash_engine):
        if not layers or len(layers[-1]) != 1:
            raise ValueError("Tree layers must end with a single root")
        self._layers = tuple(tuple(layer) for layer in layers)
        self._hash_engine = hash_engine
        self._leaf_index = {}
        for i, digest in enumerate(self._layers[0]):
            self._leaf_index.setdefault(digest, i)

    @classmethod
    def build(cls, leaves, hash_engine=None, config=None):
        """
        Build a tree over caller-encoded leaves kept in input order.

        Raises:
            EmptyInputError: leaves is empty
            TypeError: a leaf is not a bytes-like object
        """
        config = config or get_merkle_config()
        hash_engine = hash_engine or HashEngine.for_scheme(config.hash_scheme)
        checked = _check_leaves(leaves)
        leaf_digests = [hash_engine.leaf_digest(leaf) for leaf in checked]
        tree = cls(build_layers(leaf_digests, hash_engine, config), hash_engine)
        logger.debug("Built tree: %d leaves, depth %d, root %s", tree.leaf_count, tree.depth, tree.root_hex)
        return tree

    @classmethod
    def from_sorted_leaves(cls, leaves, hash_engine=None, config=None):
        """
        Build a tree whose leaf digests are sorted by value and deduplicated
        first, as airdrop distributors do. Indices refer to that sorted order.
        """
        config = config or get_merkle_config()
        hash_engine = hash_engine or HashEngine.for_scheme(config.hash_scheme)
        checked = _check_leaves(leaves)
        leaf_digests = sorted({hash_engine.leaf_digest(leaf) for leaf in checked})
        return cls(build_layers(leaf_digests, hash_engine, config), hash_engine)

    @property
    def layers(self):
        return self._layers

    @property
    def hash_engine(self):
        return self._hash_engine

    @property
    def root(self):
        return self._layers[-1][0]

    @property
    def root_hex(self):
        return digest_to_hex(self.root)

    @property
    def leaf_count(self):
        return len(self._layers[0])

    @property
    def depth(self):
        """Number of layers above the leaves."""
        return len(self._layers) - 1

    def leaf_digest_at(self, index):
        check_leaf_index(index, self.leaf_count)
        return self._layers[0][index]

    def index_of(self, leaf_bytes):
        """Index of the first leaf equal to leaf_bytes, or None."""
        return self._leaf_index.get(self._hash_engine.leaf_digest(leaf_bytes))

    def get_proof(self, index):
        return generate_proof(self._layers, index)

    def get_proof_for_leaf(self, leaf_bytes):
        """Proof for a leaf looked up by content; None when it is not in the tree."""
        index = self.index_of(leaf_bytes)
        if index is None:
            return None
        return self.get_proof(index)

    def get_multiproof(self, indices):
        return generate_multiproof(self._layers, indices)

    def verify_proof(self, leaf_bytes, index, proof):
        return verify_proof(leaf_bytes, index, proof, self.root, self._hash_engine)

    def verify_multiproof(self, leaves, multiproof):
        """Leaves must be given in multiproof.leaf_indices order."""
        return verify_multiproof(leaves, multiproof.leaf_indices, multiproof, self.root, self._hash_engine)

    def __len__(self):
        return self.leaf_count

    def __repr__(self):
        return f"MerkleTree(leaves={self.leaf_count}, depth={self.depth}, root={self.root_hex})"


def build_tree(leaves, hash_engine=None, config=None):
    """Build a MerkleTree over leaves in input order."""
    return MerkleTree.build(leaves, hash_engine=hash_engine, config=config)
