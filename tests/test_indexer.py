from __future__ import annotations

import msgspec
import pytest

from builders import balance, pump_buy, pump_ix, spl_transfer, swap_accounts, token_ix, transaction
from solana_event_indexer.block.block import Block
from solana_event_indexer.coders.base_coder import CoderRegistry
from solana_event_indexer.coders.spl_token.coder import SplTokenCoder
from solana_event_indexer.coders.spl_token.events import TransferEvent
from solana_event_indexer.errors import LedgerLookupError, TransactionProcessingError, TruncatedPayload
from solana_event_indexer.indexer import EventIndexer
from solana_event_indexer.utils.known_programs import SPL_TOKEN_PROGRAM_ID

PRE = [balance("alice_ata", 100, owner="alice"), balance("bob_ata", 10, owner="bob")]


def good_transaction(signature: str = "good"):
    return transaction([token_ix(spl_transfer(30), ["alice_ata", "bob_ata", "alice"])], pre=PRE, signature=signature)


def bad_transaction(signature: str = "bad"):
    return transaction([token_ix(spl_transfer(30), ["ghost_a", "ghost_b", "ghost"])], signature=signature)


def make_block(*transactions) -> Block:
    return Block(slot=100, blockhash="hash", parent_slot=99, transactions=list(transactions))


def test_failed_transaction_has_no_events(token_indexer: EventIndexer) -> None:
    tx = transaction(
        [token_ix(spl_transfer(30), ["alice_ata", "bob_ata", "alice"])],
        pre=PRE,
        error={"InstructionError": [0, {"Custom": 1}]},
    )

    assert token_indexer.process_transaction(tx) == []


def test_unknown_discriminant_is_dropped(token_indexer: EventIndexer) -> None:
    tx = transaction(
        [token_ix(bytes([250, 1]), ["alice_ata"]), token_ix(spl_transfer(30), ["alice_ata", "bob_ata", "alice"])],
        pre=PRE,
    )

    events = token_indexer.process_transaction(tx)

    assert len(events) == 1
    assert isinstance(events[0], TransferEvent)


def test_malformed_payload_fails_the_transaction(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([3, 1]), ["alice_ata", "bob_ata", "alice"])], pre=PRE, signature="broken")

    with pytest.raises(TransactionProcessingError) as exc_info:
        token_indexer.process_transaction(tx)

    assert isinstance(exc_info.value.cause, TruncatedPayload)
    assert str(exc_info.value).startswith("Transaction broken error:")


def test_other_programs_are_ignored(token_indexer: EventIndexer) -> None:
    tx = transaction([pump_ix(pump_buy(1, 1), swap_accounts())])

    assert token_indexer.process_transaction(tx) == []


def test_block_keeps_only_transactions_with_events(token_indexer: EventIndexer) -> None:
    failed = transaction([token_ix(spl_transfer(1), ["alice_ata", "bob_ata", "alice"])], pre=PRE, signature="f", error="err")
    empty = transaction([], signature="empty")

    result = token_indexer.process_block(make_block(good_transaction(), failed, empty))

    assert result.slot == 100
    assert [tx.signature for tx in result.transactions] == ["good"]
    assert result.skipped == []


def test_abort_policy_stops_at_first_failure(token_indexer: EventIndexer) -> None:
    with pytest.raises(TransactionProcessingError) as exc_info:
        token_indexer.process_block(make_block(good_transaction(), bad_transaction(), good_transaction("later")))

    assert exc_info.value.signature == "bad"
    assert isinstance(exc_info.value.cause, LedgerLookupError)


def test_skip_policy_records_failures(skipping_indexer: EventIndexer) -> None:
    result = skipping_indexer.process_block(
        make_block(good_transaction(), bad_transaction(), good_transaction("later"))
    )

    assert [tx.signature for tx in result.transactions] == ["good", "later"]
    assert result.skipped == ["bad"]


def test_processing_is_deterministic(token_indexer: EventIndexer) -> None:
    block = make_block(good_transaction(), good_transaction("second"))

    first = msgspec.json.encode(token_indexer.process_block(block))
    second = msgspec.json.encode(token_indexer.process_block(block))

    assert first == second


def test_registry_rejects_duplicate_programs() -> None:
    registry = CoderRegistry([SplTokenCoder()])

    with pytest.raises(ValueError):
        registry.register(SplTokenCoder())

    assert registry.program_ids == {SPL_TOKEN_PROGRAM_ID}
    assert registry.get_coder_for_program("unknown") is None
    assert len(registry.get_all_coders()) == 1
