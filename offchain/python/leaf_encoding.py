"""
Leaf Encoding for Airdrop Claims

Packs (account, amount) claims the same way Solidity's
abi.encodePacked(address, uint256) does: 20 address bytes followed by the
amount as a 32-byte big-endian word.
"""

from eth_utils import to_canonical_address

UINT256_MAX = 2**256 - 1


def encode_account_amount(account, amount):
    """Encode one claim. Accepts checksummed or lowercase hex addresses."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer, got {type(amount).__name__}")
    if amount < 0 or amount > UINT256_MAX:
        raise ValueError(f"Amount {amount} does not fit in uint256")
    return to_canonical_address(account) + amount.to_bytes(32, 'big')


def encode_claims(claims):
    """Encode an iterable of (account, amount) pairs, keeping their order."""
    return [encode_account_amount(account, amount) for account, amount in claims]
