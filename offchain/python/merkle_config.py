#!/usr/bin/env python3
"""
Configuration for Merkle Tree Construction

This module provides easy configuration switching between hashing schemes
and build settings:
1. Domain-separated hashing (0x00 leaf tag, 0x01 node tag)
2. OpenZeppelin-compatible hashing (no tags, matches MerkleProof.processProof)
"""

from enum import Enum
from dataclasses import dataclass, replace
from typing import Optional


class HashScheme(Enum):
    """Leaf/node hashing conventions understood by the verifier contracts."""
    DOMAIN_SEPARATED = "domain-separated"  # keccak(0x00 || leaf), keccak(0x01 || min || max)
    OPENZEPPELIN = "openzeppelin"          # keccak(leaf), keccak(min || max)


@dataclass(frozen=True)
class MerkleConfig:
    """Configuration for tree construction."""
    hash_scheme: HashScheme = HashScheme.DOMAIN_SEPARATED

    # Parallel build settings
    parallel_threshold: int = 4096     # Hash a layer on a thread pool once it has this many pairs
    max_workers: Optional[int] = None  # None lets ThreadPoolExecutor pick

    # Debugging
    verbose_logging: bool = False      # Log every layer while building


# Global configuration
MERKLE_CONFIG = MerkleConfig()


def get_merkle_config() -> MerkleConfig:
    """Get current Merkle configuration."""
    return MERKLE_CONFIG


def set_merkle_config(**kwargs) -> MerkleConfig:
    """Replace selected fields of the global configuration."""
    global MERKLE_CONFIG
    unknown = [key for key in kwargs if not hasattr(MERKLE_CONFIG, key)]
    if unknown:
        raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")
    if 'hash_scheme' in kwargs and not isinstance(kwargs['hash_scheme'], HashScheme):
        kwargs['hash_scheme'] = HashScheme(kwargs['hash_scheme'])
    if kwargs.get('parallel_threshold', 1) < 1:
        raise ValueError("parallel_threshold must be at least 1")
    MERKLE_CONFIG = replace(MERKLE_CONFIG, **kwargs)
    return MERKLE_CONFIG


def reset_to_default_config():
    """Reset configuration to default values."""
    global MERKLE_CONFIG
    MERKLE_CONFIG = MerkleConfig()
