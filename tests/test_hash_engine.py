"""
Tests for leaf/node hashing.
"""

import pytest
from eth_utils import keccak

from hash_engine import DEFAULT_ENGINE, HashEngine, Keccak256, combine_and_hash
from merkle_config import HashScheme


def test_leaf_digest_is_tagged_keccak(engine):
    assert engine.leaf_digest(b"a") == keccak(b"\x00a")
    assert len(engine.leaf_digest(b"")) == 32


def test_node_digest_orders_children_by_value(engine):
    a, b = engine.leaf_digest(b"a"), engine.leaf_digest(b"b")
    low, high = sorted([a, b])
    assert engine.node_digest(a, b) == keccak(b"\x01" + low + high)
    assert engine.node_digest(a, b) == engine.node_digest(b, a)


def test_node_digest_commutative_over_many_pairs(engine):
    digests = [engine.leaf_digest(bytes([i])) for i in range(16)]
    for a in digests:
        for b in digests:
            assert engine.node_digest(a, b) == engine.node_digest(b, a)


def test_leaf_and_node_digests_are_separated(engine):
    a, b = engine.leaf_digest(b"a"), engine.leaf_digest(b"b")
    low, high = sorted([a, b])
    # The 64 bytes of an internal node presented as a leaf must not hash to that node
    assert engine.leaf_digest(low + high) != engine.node_digest(a, b)


def test_openzeppelin_scheme_has_no_tags():
    engine = HashEngine.for_scheme(HashScheme.OPENZEPPELIN)
    a, b = keccak(b"x"), keccak(b"y")
    assert engine.leaf_digest(b"x") == a
    assert engine.node_digest(b, a) == keccak(min(a, b) + max(a, b))


def test_custom_hash_function_is_used():
    class Counting:
        def __init__(self):
            self.calls = 0

        def hash(self, data):
            self.calls += 1
            return Keccak256().hash(data)

    counting = Counting()
    engine = HashEngine(counting)
    engine.leaf_digest(b"a")
    engine.node_digest(b"\x00" * 32, b"\x01" * 32)
    assert counting.calls == 2


def test_identical_prefixes_rejected():
    with pytest.raises(ValueError):
        HashEngine(leaf_prefix=b"\x07", node_prefix=b"\x07")


def test_combine_and_hash_accepts_prefixed_hex():
    a, b = DEFAULT_ENGINE.leaf_digest(b"a"), DEFAULT_ENGINE.leaf_digest(b"b")
    expected = DEFAULT_ENGINE.node_digest(a, b).hex()
    assert combine_and_hash("0x" + a.hex(), b.hex()) == expected
    assert combine_and_hash(b.hex(), a.hex()) == expected


def test_engines_compare_by_configuration():
    assert HashEngine() == HashEngine.for_scheme(HashScheme.DOMAIN_SEPARATED)
    assert HashEngine() != HashEngine.for_scheme(HashScheme.OPENZEPPELIN)


def test_missing_hash_function_defaults_to_keccak():
    engine = HashEngine(None)
    assert isinstance(engine.hash_function, Keccak256)
    assert HashEngine.for_scheme(HashScheme.OPENZEPPELIN, None).leaf_digest(b"x") == keccak(b"x")
