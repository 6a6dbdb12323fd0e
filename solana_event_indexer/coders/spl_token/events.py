# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Normalized events emitted for SPL Token instructions."""
from __future__ import annotations

from typing import Optional, Union

from msgspec import Struct

from solana_event_indexer.coders.spl_token.instructions import AuthorityType
from solana_event_indexer.context.token_ledger import TokenAccount


class SplTokenEvent(Struct, frozen=True, tag_field="type"):
    """Base class for SPL Token events, tagged by `type` when serialized."""


class InitializeMintEvent(SplTokenEvent, frozen=True, tag="initialize_mint"):
    mint: str
    decimals: int
    mint_authority: str
    freeze_authority: Optional[str] = None


class InitializeAccountEvent(SplTokenEvent, frozen=True, tag="initialize_account"):
    account: TokenAccount


class InitializeMultisigEvent(SplTokenEvent, frozen=True, tag="initialize_multisig"):
    multisig: str
    signers: list[str]
    m: int


class TransferEvent(SplTokenEvent, frozen=True, tag="transfer"):
    source: TokenAccount
    destination: TokenAccount
    amount: int
    authority: str


class ApproveEvent(SplTokenEvent, frozen=True, tag="approve"):
    source: TokenAccount
    delegate: str
    amount: int


class RevokeEvent(SplTokenEvent, frozen=True, tag="revoke"):
    source: TokenAccount


class SetAuthorityEvent(SplTokenEvent, frozen=True, tag="set_authority"):
    mint: str
    authority: str
    authority_type: AuthorityType
    new_authority: Optional[str] = None


class MintToEvent(SplTokenEvent, frozen=True, tag="mint_to"):
    mint: str
    destination: TokenAccount
    mint_authority: str
    amount: int


class BurnEvent(SplTokenEvent, frozen=True, tag="burn"):
    source: TokenAccount
    authority: str
    amount: int


class CloseAccountEvent(SplTokenEvent, frozen=True, tag="close_account"):
    source: TokenAccount
    destination: str


class FreezeAccountEvent(SplTokenEvent, frozen=True, tag="freeze_account"):
    source: TokenAccount
    freeze_authority: str


class ThawAccountEvent(SplTokenEvent, frozen=True, tag="thaw_account"):
    source: TokenAccount
    freeze_authority: str


class InitializeImmutableOwnerEvent(SplTokenEvent, frozen=True, tag="initialize_immutable_owner"):
    account: TokenAccount


class SyncNativeEvent(SplTokenEvent, frozen=True, tag="sync_native"):
    account: TokenAccount


SplTokenEventType = Union[
    InitializeMintEvent,
    InitializeAccountEvent,
    InitializeMultisigEvent,
    TransferEvent,
    ApproveEvent,
    RevokeEvent,
    SetAuthorityEvent,
    MintToEvent,
    BurnEvent,
    CloseAccountEvent,
    FreezeAccountEvent,
    ThawAccountEvent,
    InitializeImmutableOwnerEvent,
    SyncNativeEvent,
]
