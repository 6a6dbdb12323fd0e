# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Binary layouts and decoded variants of SPL Token instructions."""
from __future__ import annotations

from enum import IntEnum
from typing import Optional

from borsh_construct import CStruct, U8, U64
from construct import Bytes, GreedyString, If, this
from msgspec import Struct

from solana_event_indexer.coders.borsh_utils import (
    convert_b58_bytes_to_string,
    parse_coption_pubkey,
    parse_layout,
)
from solana_event_indexer.errors import InvalidPayload, TruncatedPayload, UnknownDiscriminant

# Borsh layouts for SPL Token instructions
discriminator_layout = CStruct(
    "discriminator" / U8,
)

initialize_mint_layout = CStruct(
    "discriminator" / U8,
    "decimals" / U8,
    "mint_authority" / Bytes(32),
    "freeze_authority_option" / U8,
    "freeze_authority" / If(this.freeze_authority_option == 1, Bytes(32)),
)

initialize_multisig_layout = CStruct(
    "discriminator" / U8,
    "m" / U8,
)

amount_layout = CStruct(
    "discriminator" / U8,
    "amount" / U64,
)

amount_checked_layout = CStruct(
    "discriminator" / U8,
    "amount" / U64,
    "decimals" / U8,
)

set_authority_layout = CStruct(
    "discriminator" / U8,
    "authority_type" / U8,
    "new_authority_option" / U8,
    "new_authority" / If(this.new_authority_option == 1, Bytes(32)),
)

initialize_account_owner_layout = CStruct(
    "discriminator" / U8,
    "owner" / Bytes(32),
)

ui_amount_layout = CStruct(
    "discriminator" / U8,
    "ui_amount" / GreedyString("utf8"),
)


class AuthorityType(IntEnum):
    MINT_TOKENS = 0
    FREEZE_ACCOUNT = 1
    ACCOUNT_OWNER = 2
    CLOSE_ACCOUNT = 3


class SplTokenInstructionData(Struct, frozen=True):
    """Base class for SPL Token instruction data."""
    discriminator: int


class InitializeMintData(SplTokenInstructionData, frozen=True):
    """InitializeMint / InitializeMint2 instruction data."""
    decimals: int
    mint_authority: str
    freeze_authority: Optional[str] = None


class InitializeAccountData(SplTokenInstructionData, frozen=True):
    """InitializeAccount (owner passed as account) / InitializeAccount2 / InitializeAccount3 data."""
    owner: Optional[str] = None


class InitializeMultisigData(SplTokenInstructionData, frozen=True):
    m: int

    @property
    def has_rent_sysvar(self) -> bool:
        """InitializeMultisig takes the rent sysvar before the signers, InitializeMultisig2 does not."""
        return self.discriminator == 2


class TransferData(SplTokenInstructionData, frozen=True):
    """Transfer / TransferChecked instruction data."""
    amount: int
    decimals: Optional[int] = None


class ApproveData(SplTokenInstructionData, frozen=True):
    amount: int
    decimals: Optional[int] = None


class RevokeData(SplTokenInstructionData, frozen=True):
    pass


class SetAuthorityData(SplTokenInstructionData, frozen=True):
    authority_type: AuthorityType
    new_authority: Optional[str] = None


class MintToData(SplTokenInstructionData, frozen=True):
    """MintTo / MintToChecked instruction data."""
    amount: int
    decimals: Optional[int] = None


class BurnData(SplTokenInstructionData, frozen=True):
    """Burn / BurnChecked instruction data."""
    amount: int
    decimals: Optional[int] = None


class CloseAccountData(SplTokenInstructionData, frozen=True):
    pass


class FreezeAccountData(SplTokenInstructionData, frozen=True):
    pass


class ThawAccountData(SplTokenInstructionData, frozen=True):
    pass


class SyncNativeData(SplTokenInstructionData, frozen=True):
    pass


class InitializeImmutableOwnerData(SplTokenInstructionData, frozen=True):
    pass


class GetAccountDataSizeData(SplTokenInstructionData, frozen=True):
    pass


class AmountToUiAmountData(SplTokenInstructionData, frozen=True):
    amount: int


class UiAmountToAmountData(SplTokenInstructionData, frozen=True):
    ui_amount: str


def _decode_initialize_mint(data: bytes, discriminator: int, variant: str) -> InitializeMintData:
    decoded = parse_layout(initialize_mint_layout, data, variant)
    return InitializeMintData(
        discriminator=discriminator,
        decimals=decoded.decimals,
        mint_authority=convert_b58_bytes_to_string(decoded.mint_authority),
        freeze_authority=parse_coption_pubkey(
            decoded.freeze_authority_option, decoded.freeze_authority, variant
        ),
    )


def _decode_set_authority(data: bytes, discriminator: int) -> SetAuthorityData:
    decoded = parse_layout(set_authority_layout, data, "SetAuthority")
    try:
        authority_type = AuthorityType(decoded.authority_type)
    except ValueError as e:
        raise InvalidPayload(f"Invalid authority type {decoded.authority_type}") from e
    return SetAuthorityData(
        discriminator=discriminator,
        authority_type=authority_type,
        new_authority=parse_coption_pubkey(
            decoded.new_authority_option, decoded.new_authority, "SetAuthority"
        ),
    )


def decode_instruction(data: bytes) -> SplTokenInstructionData:
    """Unpacks a raw SPL Token instruction payload.

    Raises:
        TruncatedPayload: the payload is shorter than its variant's layout
        UnknownDiscriminant: the first byte is not a known instruction
        InvalidPayload: an option tag or enum value is out of range
    """
    if len(data) == 0:
        raise TruncatedPayload("TokenInstruction", 0)

    discriminator = data[0]

    match discriminator:
        case 0:
            return _decode_initialize_mint(data, discriminator, "InitializeMint")
        case 1:
            return InitializeAccountData(discriminator=discriminator)
        case 2 | 19:
            variant = "InitializeMultisig" if discriminator == 2 else "InitializeMultisig2"
            decoded = parse_layout(initialize_multisig_layout, data, variant)
            return InitializeMultisigData(discriminator=discriminator, m=decoded.m)
        case 3:
            decoded = parse_layout(amount_layout, data, "Transfer")
            return TransferData(discriminator=discriminator, amount=decoded.amount)
        case 4:
            decoded = parse_layout(amount_layout, data, "Approve")
            return ApproveData(discriminator=discriminator, amount=decoded.amount)
        case 5:
            return RevokeData(discriminator=discriminator)
        case 6:
            return _decode_set_authority(data, discriminator)
        case 7:
            decoded = parse_layout(amount_layout, data, "MintTo")
            return MintToData(discriminator=discriminator, amount=decoded.amount)
        case 8:
            decoded = parse_layout(amount_layout, data, "Burn")
            return BurnData(discriminator=discriminator, amount=decoded.amount)
        case 9:
            return CloseAccountData(discriminator=discriminator)
        case 10:
            return FreezeAccountData(discriminator=discriminator)
        case 11:
            return ThawAccountData(discriminator=discriminator)
        case 12:
            decoded = parse_layout(amount_checked_layout, data, "TransferChecked")
            return TransferData(discriminator=discriminator, amount=decoded.amount, decimals=decoded.decimals)
        case 13:
            decoded = parse_layout(amount_checked_layout, data, "ApproveChecked")
            return ApproveData(discriminator=discriminator, amount=decoded.amount, decimals=decoded.decimals)
        case 14:
            decoded = parse_layout(amount_checked_layout, data, "MintToChecked")
            return MintToData(discriminator=discriminator, amount=decoded.amount, decimals=decoded.decimals)
        case 15:
            decoded = parse_layout(amount_checked_layout, data, "BurnChecked")
            return BurnData(discriminator=discriminator, amount=decoded.amount, decimals=decoded.decimals)
        case 16 | 18:
            variant = "InitializeAccount2" if discriminator == 16 else "InitializeAccount3"
            decoded = parse_layout(initialize_account_owner_layout, data, variant)
            return InitializeAccountData(
                discriminator=discriminator,
                owner=convert_b58_bytes_to_string(decoded.owner),
            )
        case 17:
            return SyncNativeData(discriminator=discriminator)
        case 20:
            return _decode_initialize_mint(data, discriminator, "InitializeMint2")
        case 21:
            return GetAccountDataSizeData(discriminator=discriminator)
        case 22:
            return InitializeImmutableOwnerData(discriminator=discriminator)
        case 23:
            decoded = parse_layout(amount_layout, data, "AmountToUiAmount")
            return AmountToUiAmountData(discriminator=discriminator, amount=decoded.amount)
        case 24:
            decoded = parse_layout(ui_amount_layout, data, "UiAmountToAmount")
            return UiAmountToAmountData(discriminator=discriminator, ui_amount=decoded.ui_amount)
        case _:
            raise UnknownDiscriminant("spl-token", data[:1])
