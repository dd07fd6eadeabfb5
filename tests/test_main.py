"""
Tests for the command line interface.
"""

import json
from unittest.mock import MagicMock

import pytest

from leaf_encoding import encode_claims
from main import main
from merkle_config import HashScheme, get_merkle_config
from merkle_tree_builder import build_tree


@pytest.fixture
def leaves_file(tmp_path, leaves):
    path = tmp_path / "leaves.json"
    path.write_text(json.dumps(["0x" + leaf.hex() for leaf in leaves]))
    return path


def test_build_prints_root(leaves_file, leaves, capsys):
    assert main(["build", str(leaves_file)]) == 0
    out = capsys.readouterr().out
    assert build_tree(leaves).root_hex in out
    assert f"Leaves: {len(leaves)}" in out


def test_proof_prints_json(leaves_file, leaves, capsys):
    assert main(["proof", str(leaves_file), "2"]) == 0
    document = json.loads(capsys.readouterr().out)
    tree = build_tree(leaves)
    assert document["root"] == tree.root_hex
    assert document["proof"] == tree.get_proof(2).to_hex_list()


def test_multiproof_prints_json(leaves_file, leaves, capsys):
    assert main(["multiproof", str(leaves_file), "5", "1"]) == 0
    document = json.loads(capsys.readouterr().out)
    assert document["leaf_indices"] == [1, 5]
    assert len(document["leaves"]) == 2


def test_verify_command(leaves_file, capsys):
    assert main(["verify", str(leaves_file), "6"]) == 0
    assert "Local check passed" in capsys.readouterr().out


def test_claims_file_with_sorted_openzeppelin_tree(tmp_path, capsys):
    path = tmp_path / "claims.json"
    path.write_text(json.dumps([
        {"account": "0x00393d62f17b07e64f7cdcdf9bdc2fd925b20bba", "amount": "1840233889215604334017"},
        {"account": "0x008EF27b8d0B9f8c1FAdcb624ef5FebE4f11fa9f", "amount": 73750290420694562195},
    ]))
    assert main(["--scheme", "openzeppelin", "--sorted", "verify", str(path), "1"]) == 0
    assert get_merkle_config().hash_scheme is HashScheme.OPENZEPPELIN
    assert main(["--scheme", "openzeppelin", "--sorted", "build", str(path)]) == 0
    assert "0x54f23346bacf6e33c89e27917b92354a0b89c670bc67918bd17debf369bbd3fa" in capsys.readouterr().out


def test_out_of_range_index_reports_error(leaves_file, capsys):
    assert main(["proof", str(leaves_file), "99"]) == 1
    assert "ERROR" in capsys.readouterr().out


def test_empty_file_reports_error(tmp_path, capsys):
    path = tmp_path / "empty.json"
    path.write_text("[]")
    assert main(["build", str(path)]) == 1
    assert "ERROR" in capsys.readouterr().out


def test_encoded_claims_match_hex_entries(tmp_path, capsys):
    claims = [("0x1111111111111111111111111111111111111111", 7)]
    path = tmp_path / "hex.json"
    path.write_text(json.dumps(["0x" + leaf.hex() for leaf in encode_claims(claims)]))
    assert main(["build", str(path)]) == 0
    assert build_tree(encode_claims(claims)).root_hex in capsys.readouterr().out


def test_publish_without_unlocked_accounts_reports_failure(leaves_file, tmp_path, monkeypatch, capsys):
    fake_web3 = MagicMock()
    fake_web3.return_value.is_connected.return_value = True
    fake_web3.return_value.eth.accounts = []
    monkeypatch.setattr("web3.Web3", fake_web3)

    assert main(["publish", str(leaves_file), "--artifact", str(tmp_path / "Verifier.json")]) == 1
    assert "no unlocked accounts" in capsys.readouterr().out
