from __future__ import annotations

import struct

import msgspec
import pytest

from builders import (
    balance,
    pubkey_bytes,
    spl_burn,
    spl_mint_to,
    spl_transfer,
    spl_transfer_checked,
    token_ix,
    transaction,
)
from solana_event_indexer.coders.spl_token.coder import SplTokenCoder
from solana_event_indexer.coders.spl_token.events import (
    ApproveEvent,
    BurnEvent,
    CloseAccountEvent,
    FreezeAccountEvent,
    InitializeAccountEvent,
    InitializeImmutableOwnerEvent,
    InitializeMintEvent,
    InitializeMultisigEvent,
    MintToEvent,
    RevokeEvent,
    SetAuthorityEvent,
    SyncNativeEvent,
    ThawAccountEvent,
    TransferEvent,
)
from solana_event_indexer.coders.spl_token.instructions import AuthorityType
from solana_event_indexer.context.token_ledger import TokenAccount, TransactionContext
from solana_event_indexer.errors import AccountIndexError, CorrelationError, TransactionProcessingError
from solana_event_indexer.indexer import EventIndexer

PRE = [balance("alice_ata", 100, owner="alice"), balance("bob_ata", 10, owner="bob")]


def test_transfer_event_carries_ledger_snapshots(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_transfer(30), ["alice_ata", "bob_ata", "alice"])], pre=PRE)

    [event] = token_indexer.process_transaction(tx)

    assert event == TransferEvent(
        source=TokenAccount(address="alice_ata", owner="alice", mint="mint", pre_balance=100, post_balance=70),
        destination=TokenAccount(address="bob_ata", owner="bob", mint="mint", pre_balance=10, post_balance=40),
        amount=30,
        authority="alice",
    )


def test_initialize_mint_event(token_indexer: EventIndexer) -> None:
    data = bytes([0, 6]) + pubkey_bytes(3) + bytes([0])
    tx = transaction([token_ix(data, ["new_mint", "rent"])])

    [event] = token_indexer.process_transaction(tx)

    assert isinstance(event, InitializeMintEvent)
    assert event.mint == "new_mint"
    assert event.decimals == 6
    assert event.freeze_authority is None


def test_multisig_signers_follow_layout(token_indexer: EventIndexer) -> None:
    tx = transaction([
        token_ix(bytes([2, 2]), ["multisig", "rent", "s1", "s2", "s3"]),
        token_ix(bytes([19, 1]), ["multisig2", "s4"]),
    ])

    first, second = token_indexer.process_transaction(tx)

    assert first == InitializeMultisigEvent(multisig="multisig", signers=["s1", "s2", "s3"], m=2)
    assert second == InitializeMultisigEvent(multisig="multisig2", signers=["s4"], m=1)


def test_freeze_and_thaw_read_authority_from_second_account(token_indexer: EventIndexer) -> None:
    tx = transaction(
        [
            token_ix(bytes([10]), ["alice_ata", "mint", "freezer"]),
            token_ix(bytes([11]), ["alice_ata", "mint", "freezer"]),
        ],
        pre=PRE,
    )

    freeze, thaw = token_indexer.process_transaction(tx)

    assert isinstance(freeze, FreezeAccountEvent)
    assert isinstance(thaw, ThawAccountEvent)
    assert freeze.freeze_authority == "mint"
    assert thaw.source.address == "alice_ata"


def test_set_authority_event(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([6, 0, 0]), ["some_mint", "old_authority"])])

    [event] = token_indexer.process_transaction(tx)

    assert event == SetAuthorityEvent(
        mint="some_mint",
        authority="old_authority",
        authority_type=AuthorityType.MINT_TOKENS,
        new_authority=None,
    )


def test_informational_instructions_have_no_event(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([21]), ["mint"]), token_ix(bytes([24]) + b"2.5", ["mint"])])

    assert token_indexer.process_transaction(tx) == []


def test_missing_account_fails_the_transaction(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_transfer(30), ["alice_ata", "bob_ata"])], pre=PRE, signature="short")

    with pytest.raises(TransactionProcessingError) as exc_info:
        token_indexer.process_transaction(tx)

    assert isinstance(exc_info.value.cause, AccountIndexError)
    assert exc_info.value.cause.field == "authority"


def test_parse_transfer_instruction_rejects_other_variants(spl_coder: SplTokenCoder) -> None:
    context = TransactionContext(transaction([], pre=PRE))

    with pytest.raises(CorrelationError):
        spl_coder.parse_transfer_instruction(token_ix(spl_mint_to(1), ["mint", "alice_ata", "auth"]), context)


def test_events_serialize_with_type_tag(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_transfer(30), ["alice_ata", "bob_ata", "alice"])], pre=PRE)

    encoded = msgspec.json.decode(msgspec.json.encode(token_indexer.process_transaction(tx)))

    assert encoded[0]["type"] == "transfer"
    assert encoded[0]["source"]["post_balance"] == 70


def snapshot(address: str, owner: str, pre: int, post: int) -> TokenAccount:
    return TokenAccount(address=address, owner=owner, mint="mint", pre_balance=pre, post_balance=post)


ALICE = snapshot("alice_ata", "alice", 100, 100)


def test_transfer_checked_skips_mint_account(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_transfer_checked(30, 6), ["alice_ata", "mint", "bob_ata", "alice"])], pre=PRE)

    [event] = token_indexer.process_transaction(tx)

    assert event == TransferEvent(
        source=snapshot("alice_ata", "alice", 100, 70),
        destination=snapshot("bob_ata", "bob", 10, 40),
        amount=30,
        authority="alice",
    )


def test_approve_and_approve_checked_delegates(token_indexer: EventIndexer) -> None:
    tx = transaction(
        [
            token_ix(bytes([4]) + struct.pack("<Q", 25), ["alice_ata", "delegate", "alice"]),
            token_ix(bytes([13]) + struct.pack("<QB", 25, 6), ["alice_ata", "mint", "checked_delegate", "alice"]),
        ],
        pre=PRE,
    )

    approve, approve_checked = token_indexer.process_transaction(tx)

    assert approve == ApproveEvent(source=ALICE, delegate="delegate", amount=25)
    assert approve_checked == ApproveEvent(source=ALICE, delegate="checked_delegate", amount=25)


def test_revoke_event(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([5]), ["alice_ata", "alice"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [RevokeEvent(source=ALICE)]


def test_mint_to_event(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_mint_to(50), ["mint", "bob_ata", "mint_authority"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [
        MintToEvent(
            mint="mint",
            destination=snapshot("bob_ata", "bob", 10, 60),
            mint_authority="mint_authority",
            amount=50,
        )
    ]


def test_burn_reads_authority_from_third_account(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(spl_burn(8), ["alice_ata", "mint", "alice"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [
        BurnEvent(source=snapshot("alice_ata", "alice", 100, 92), authority="alice", amount=8)
    ]


def test_close_account_event(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([9]), ["bob_ata", "bob_wallet", "bob"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [
        CloseAccountEvent(source=snapshot("bob_ata", "bob", 10, 0), destination="bob_wallet")
    ]


def test_initialize_account_event_sees_registered_account(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([1]), ["fresh_ata", "mint", "carol", "rent"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [
        InitializeAccountEvent(account=snapshot("fresh_ata", "carol", 0, 0))
    ]


def test_immutable_owner_and_sync_native_events(token_indexer: EventIndexer) -> None:
    tx = transaction([token_ix(bytes([22]), ["alice_ata"]), token_ix(bytes([17]), ["alice_ata"])], pre=PRE)

    assert token_indexer.process_transaction(tx) == [
        InitializeImmutableOwnerEvent(account=ALICE),
        SyncNativeEvent(account=ALICE),
    ]
