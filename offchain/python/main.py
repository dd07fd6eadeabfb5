#!/usr/bin/env python3
"""
Merkle Tree CLI

Builds a tree over a JSON leaves file and prints roots and proofs in the
format the verifier contract consumes.

Leaves file: a JSON list of 0x-prefixed hex strings (already encoded
leaves) or of {"account": ..., "amount": ...} claim objects.
"""

import argparse
import json
import logging
import sys

from eth_utils import decode_hex

from hash_engine import HashEngine
from leaf_encoding import encode_account_amount
from merkle_config import HashScheme, get_merkle_config, set_merkle_config
from merkle_errors import MerkleTreeError
from merkle_tree_builder import MerkleTree
from proof_types import digest_to_hex


def load_leaves(path):
    with open(path, 'r') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Leaves file '{path}' must contain a JSON list")
    leaves = []
    for entry in data:
        if isinstance(entry, str):
            leaves.append(decode_hex(entry))
        elif isinstance(entry, dict) and 'account' in entry and 'amount' in entry:
            leaves.append(encode_account_amount(entry['account'], int(entry['amount'])))
        else:
            raise ValueError(f"Unsupported leaf entry: {entry!r}")
    return leaves


def build_from_args(args):
    leaves = load_leaves(args.leaves_file)
    config = get_merkle_config()
    engine = HashEngine.for_scheme(config.hash_scheme)
    if args.sorted:
        return leaves, MerkleTree.from_sorted_leaves(leaves, hash_engine=engine, config=config)
    return leaves, MerkleTree.build(leaves, hash_engine=engine, config=config)


def leaf_for_index(tree, leaves, index, sorted_tree):
    # Sorted trees reorder leaves, so map back by digest
    if not sorted_tree:
        return leaves[index]
    target = tree.leaf_digest_at(index)
    for leaf in leaves:
        if tree.hash_engine.leaf_digest(leaf) == target:
            return leaf
    raise ValueError(f"No leaf found for index {index}")


def cmd_build(args):
    print("--- [SYSTEM] Building Merkle tree... ---")
    _, tree = build_from_args(args)
    print(f"-> Leaves: {tree.leaf_count}")
    print(f"-> Depth: {tree.depth}")
    print(f"-> Merkle Root: {tree.root_hex}")
    return 0


def cmd_proof(args):
    _, tree = build_from_args(args)
    proof = tree.get_proof(args.index)
    result = proof.to_dict()
    result['root'] = tree.root_hex
    result['leaf'] = digest_to_hex(tree.leaf_digest_at(args.index))
    print(json.dumps(result, indent=4))
    return 0


def cmd_multiproof(args):
    _, tree = build_from_args(args)
    multiproof = tree.get_multiproof(args.indices)
    result = multiproof.to_dict()
    result['root'] = tree.root_hex
    result['leaves'] = [digest_to_hex(tree.leaf_digest_at(i)) for i in multiproof.leaf_indices]
    print(json.dumps(result, indent=4))
    return 0


def cmd_verify(args):
    leaves, tree = build_from_args(args)
    print(f"\n--- [LOCAL CHECK] Verifying leaf {args.index} against root {tree.root_hex} ---")
    proof = tree.get_proof(args.index)
    leaf = leaf_for_index(tree, leaves, args.index, args.sorted)
    is_valid = tree.verify_proof(leaf, args.index, proof)
    print(f"-> Generated proof with {len(proof)} nodes.")
    if is_valid:
        print("-> ✅ Local check passed!")
        return 0
    print("-> 🔴 Local check failed!")
    return 1


def cmd_publish(args):
    from web3 import Web3
    from onchain_verifier import OnChainVerifier

    _, tree = build_from_args(args)
    web3 = Web3(Web3.HTTPProvider(args.rpc_url))
    if not web3.is_connected():
        print("Failed to connect to node. Please ensure it's running.")
        return 1
    accounts = web3.eth.accounts
    if not accounts:
        print("Node has no unlocked accounts to send the transaction from.")
        return 1
    web3.eth.default_account = accounts[0]
    verifier = OnChainVerifier.from_artifact(web3, args.artifact, args.chain_id)

    print("\n--- [ON-CHAIN] Sending transaction to update Merkle Root... ---")
    receipt = verifier.update_root(tree.root)
    print(f"-> Successfully updated root! Tx hash: {receipt.transactionHash.hex()}")
    return 0


def make_parser():
    parser = argparse.ArgumentParser(description='Off-chain Merkle tree builder and prover')
    parser.add_argument('--scheme', choices=[s.value for s in HashScheme],
                        default=HashScheme.DOMAIN_SEPARATED.value,
                        help='Leaf/node hashing scheme expected by the verifier contract')
    parser.add_argument('--sorted', action='store_true',
                        help='Sort and deduplicate leaf digests before building')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    build = subparsers.add_parser('build', help='Print the root of the tree')
    build.add_argument('leaves_file')
    build.set_defaults(func=cmd_build)

    proof = subparsers.add_parser('proof', help='Print the proof for one leaf')
    proof.add_argument('leaves_file')
    proof.add_argument('index', type=int)
    proof.set_defaults(func=cmd_proof)

    multiproof = subparsers.add_parser('multiproof', help='Print a multiproof for several leaves')
    multiproof.add_argument('leaves_file')
    multiproof.add_argument('indices', type=int, nargs='+')
    multiproof.set_defaults(func=cmd_multiproof)

    verify = subparsers.add_parser('verify', help='Generate and locally verify a proof')
    verify.add_argument('leaves_file')
    verify.add_argument('index', type=int)
    verify.set_defaults(func=cmd_verify)

    publish = subparsers.add_parser('publish', help='Store the root in the verifier contract')
    publish.add_argument('leaves_file')
    publish.add_argument('--rpc-url', default='http://127.0.0.1:8545')
    publish.add_argument('--artifact', required=True,
                         help='Hardhat artifact JSON of the verifier contract')
    publish.add_argument('--chain-id', default='31337')
    publish.set_defaults(func=cmd_publish)

    return parser


def main(argv=None):
    args = make_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')
    set_merkle_config(hash_scheme=HashScheme(args.scheme), verbose_logging=args.verbose)

    try:
        return args.func(args)
    except (MerkleTreeError, ValueError, OSError) as e:
        print(f"-> ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
