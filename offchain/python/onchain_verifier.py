"""
On-chain Verifier Wrapper

Thin web3 wrapper around a deployed verifier contract exposing
updateRoot(bytes32), merkleRoot(), verify(bytes32[], bytes32) and
multiProofVerify(bytes32[], bool[], bytes32[], uint256[], uint256)
(proof, flags, leaves, leaf indices, leaf count).
"""

import json
import logging

from web3 import Web3

from merkle_errors import OnChainVerificationError
from proof_types import MultiProof, Proof, digest_to_hex, is_digest

logger = logging.getLogger(__name__)


def load_verifier_artifact(artifact_path, chain_id="31337"):
    """Read (abi, address) from a Hardhat deployment artifact."""
    try:
        with open(artifact_path, 'r') as f:
            artifact = json.load(f)
        return artifact['abi'], artifact['networks'][str(chain_id)]['address']
    except FileNotFoundError as e:
        raise OnChainVerificationError(f"Artifact file not found at '{artifact_path}'") from e
    except KeyError as e:
        raise OnChainVerificationError(f"Could not find contract address for network {chain_id} in artifact") from e


class OnChainVerifier:
    """Calls a deployed Merkle verifier contract."""

    def __init__(self, web3, contract_address, abi):
        self.web3 = web3
        self.contract = web3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=abi)

    @classmethod
    def from_artifact(cls, web3, artifact_path, chain_id="31337"):
        abi, address = load_verifier_artifact(artifact_path, chain_id)
        return cls(web3, address, abi)

    def update_root(self, root):
        """Store a new root and wait for the transaction receipt."""
        if not is_digest(root):
            raise OnChainVerificationError("Root must be a 32-byte digest")
        try:
            tx_hash = self.contract.functions.updateRoot(root).transact()
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            raise OnChainVerificationError(f"updateRoot failed: {e}") from e
        logger.info("Root %s stored on chain in tx %s", digest_to_hex(root), receipt.transactionHash.hex())
        return receipt

    def stored_root(self):
        try:
            return bytes(self.contract.functions.merkleRoot().call())
        except Exception as e:
            raise OnChainVerificationError(f"merkleRoot call failed: {e}") from e

    def verify_proof(self, proof: Proof, leaf_digest):
        try:
            return bool(self.contract.functions.verify(list(proof.siblings), leaf_digest).call())
        except Exception as e:
            raise OnChainVerificationError(f"verify call failed: {e}") from e

    def verify_multiproof(self, multiproof: MultiProof, leaf_digests):
        """leaf_digests must follow multiproof.leaf_indices order."""
        if len(leaf_digests) != len(multiproof.leaf_indices):
            raise OnChainVerificationError(
                f"Got {len(leaf_digests)} leaf digests for {len(multiproof.leaf_indices)} indices")
        try:
            return bool(self.contract.functions.multiProofVerify(
                list(multiproof.proof_digests), list(multiproof.proof_flags), list(leaf_digests),
                list(multiproof.leaf_indices), multiproof.leaf_count).call())
        except Exception as e:
            raise OnChainVerificationError(f"multiProofVerify call failed: {e}") from e
