from __future__ import annotations

from unittest.mock import AsyncMock

import msgspec
import pytest

from builders import block_response, signed_token_transfer, transaction_wrapper
from solana_event_indexer import cli
from solana_event_indexer.data_source.rpc.rpc_data_source import SolanaRPCDataSource
from solana_event_indexer.data_source.rpc.rpc_transaction_converter import SolanaTransactionDecoder


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    for name in ["SOLANA_RPC_URL", "INDEXER_PROGRAM", "INDEXER_ERROR_POLICY", "INDEXER_LOG_LEVEL", "INDEXER_LOG_FILE"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def test_file_command_prints_block_events(tmp_path, capsys) -> None:
    tx_base64, signature, source, destination, _ = signed_token_transfer(25)
    account_keys = SolanaTransactionDecoder.decode_transaction_with_solders(tx_base64).account_keys
    path = tmp_path / "block.json"
    path.write_bytes(block_response([
        transaction_wrapper(tx_base64, account_keys, balances=[(source, 100, 75), (destination, 0, 25)])
    ]))

    exit_code = cli.main(["--program", "spl_token", "file", str(path), "--slot", "100"])

    assert exit_code == 0
    output = msgspec.json.decode(capsys.readouterr().out)
    assert output["slot"] == 100
    assert output["skipped"] == []
    [tx] = output["transactions"]
    assert tx["signature"] == signature
    assert tx["events"][0]["type"] == "transfer"
    assert tx["events"][0]["amount"] == 25


def test_file_command_reports_rpc_errors(tmp_path) -> None:
    path = tmp_path / "skipped.json"
    path.write_bytes(b'{"jsonrpc":"2.0","id":1,"error":{"code":-32007,"message":"Slot 5 was skipped"}}')

    assert cli.main(["file", str(path)]) == 1


def test_invalid_environment(monkeypatch) -> None:
    monkeypatch.setenv("INDEXER_ERROR_POLICY", "sometimes")

    assert cli.main(["file", "missing.json"]) == 2


def test_slot_command_requires_rpc_url() -> None:
    assert cli.main(["slot", "1"]) == 2


def test_build_coder() -> None:
    assert cli.build_coder("pumpfun").name == "Pumpfun"
    assert cli.build_coder("spl_token").name == "SPL_Token"


def test_slot_command_prints_one_line_per_block(monkeypatch, capsys) -> None:
    rpc_call = AsyncMock(side_effect=lambda method, params: block_response([], parent_slot=params[0] - 1))
    monkeypatch.setattr(SolanaRPCDataSource, "_make_rpc_call", rpc_call)

    exit_code = cli.main(["--rpc-url", "http://localhost:8899", "slot", "7", "8"])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert [msgspec.json.decode(line)["slot"] for line in lines] == [7, 8]
    assert [call.args[1][0] for call in rpc_call.await_args_list] == [7, 8]
