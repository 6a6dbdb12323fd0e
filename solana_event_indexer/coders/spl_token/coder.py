# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""SPL Token coder for parsing token program instructions."""

from __future__ import annotations
from typing import Optional

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.coders.base_coder import BaseCoder
from solana_event_indexer.coders.spl_token import accounts
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
    SplTokenEventType,
    SyncNativeEvent,
    ThawAccountEvent,
    TransferEvent,
)
from solana_event_indexer.coders.spl_token.instructions import (
    AmountToUiAmountData,
    ApproveData,
    BurnData,
    CloseAccountData,
    FreezeAccountData,
    GetAccountDataSizeData,
    InitializeAccountData,
    InitializeImmutableOwnerData,
    InitializeMintData,
    InitializeMultisigData,
    MintToData,
    RevokeData,
    SetAuthorityData,
    SplTokenInstructionData,
    SyncNativeData,
    ThawAccountData,
    TransferData,
    UiAmountToAmountData,
    decode_instruction,
)
from solana_event_indexer.context.token_ledger import TransactionContext
from solana_event_indexer.errors import CorrelationError
from solana_event_indexer.utils.known_programs import SPL_TOKEN_PROGRAM_ID


class SplTokenCoder(BaseCoder):
    """Coder for SPL Token program instructions."""

    def __init__(self):
        super().__init__("SPL_Token", [SPL_TOKEN_PROGRAM_ID])

    def decode(self, data: bytes) -> SplTokenInstructionData:
        return decode_instruction(data)

    def parse_instruction(
            self,
            instruction: Instruction,
            context: TransactionContext
    ) -> Optional[SplTokenEventType]:
        """Parse an SPL Token instruction."""
        unpacked = self.decode(instruction.data)
        ix_accounts = instruction.accounts

        match unpacked:
            case InitializeMintData():
                return InitializeMintEvent(
                    mint=accounts.INITIALIZE_MINT.get(ix_accounts, "mint"),
                    decimals=unpacked.decimals,
                    mint_authority=unpacked.mint_authority,
                    freeze_authority=unpacked.freeze_authority,
                )

            case InitializeAccountData():
                address = accounts.INITIALIZE_ACCOUNT.get(ix_accounts, "account")
                return InitializeAccountEvent(account=context.get_token_account(address))

            case InitializeMultisigData():
                layout = accounts.INITIALIZE_MULTISIG if unpacked.has_rent_sysvar else accounts.INITIALIZE_MULTISIG_2
                return InitializeMultisigEvent(
                    multisig=layout.get(ix_accounts, "multisig"),
                    signers=layout.rest(ix_accounts),
                    m=unpacked.m,
                )

            case TransferData():
                return self._transfer_event(instruction, context, unpacked)

            case ApproveData():
                layout = accounts.APPROVE if unpacked.decimals is None else accounts.APPROVE_CHECKED
                return ApproveEvent(
                    source=context.get_token_account(layout.get(ix_accounts, "source")),
                    delegate=layout.get(ix_accounts, "delegate"),
                    amount=unpacked.amount,
                )

            case RevokeData():
                return RevokeEvent(
                    source=context.get_token_account(accounts.REVOKE.get(ix_accounts, "source")),
                )

            case SetAuthorityData():
                return SetAuthorityEvent(
                    mint=accounts.SET_AUTHORITY.get(ix_accounts, "mint"),
                    authority=accounts.SET_AUTHORITY.get(ix_accounts, "authority"),
                    authority_type=unpacked.authority_type,
                    new_authority=unpacked.new_authority,
                )

            case MintToData():
                return MintToEvent(
                    mint=accounts.MINT_TO.get(ix_accounts, "mint"),
                    destination=context.get_token_account(accounts.MINT_TO.get(ix_accounts, "destination")),
                    mint_authority=accounts.MINT_TO.get(ix_accounts, "mint_authority"),
                    amount=unpacked.amount,
                )

            case BurnData():
                return BurnEvent(
                    source=context.get_token_account(accounts.BURN.get(ix_accounts, "source")),
                    authority=accounts.BURN.get(ix_accounts, "authority"),
                    amount=unpacked.amount,
                )

            case CloseAccountData():
                return CloseAccountEvent(
                    source=context.get_token_account(accounts.CLOSE_ACCOUNT.get(ix_accounts, "source")),
                    destination=accounts.CLOSE_ACCOUNT.get(ix_accounts, "destination"),
                )

            case FreezeAccountData():
                return FreezeAccountEvent(
                    source=context.get_token_account(accounts.FREEZE_ACCOUNT.get(ix_accounts, "source")),
                    freeze_authority=accounts.FREEZE_ACCOUNT.get(ix_accounts, "freeze_authority"),
                )

            case ThawAccountData():
                return ThawAccountEvent(
                    source=context.get_token_account(accounts.THAW_ACCOUNT.get(ix_accounts, "source")),
                    freeze_authority=accounts.THAW_ACCOUNT.get(ix_accounts, "freeze_authority"),
                )

            case InitializeImmutableOwnerData():
                address = accounts.INITIALIZE_IMMUTABLE_OWNER.get(ix_accounts, "account")
                return InitializeImmutableOwnerEvent(account=context.get_token_account(address))

            case SyncNativeData():
                address = accounts.SYNC_NATIVE.get(ix_accounts, "account")
                return SyncNativeEvent(account=context.get_token_account(address))

            # informational instructions, nothing changes on-chain
            case GetAccountDataSizeData() | AmountToUiAmountData() | UiAmountToAmountData():
                return None

        return None

    def parse_transfer_instruction(
            self,
            instruction: Instruction,
            context: TransactionContext
    ) -> TransferEvent:
        """Parse an instruction that must be a Transfer or TransferChecked.

        Used by other coders to read token movements nested in their instructions.

        Raises:
            CorrelationError: if the instruction is another token instruction
        """
        unpacked = self.decode(instruction.data)
        if not isinstance(unpacked, TransferData):
            raise CorrelationError(
                f"Expected a token transfer, found {type(unpacked).__name__}"
            )
        return self._transfer_event(instruction, context, unpacked)

    @staticmethod
    def _transfer_event(
            instruction: Instruction,
            context: TransactionContext,
            unpacked: TransferData
    ) -> TransferEvent:
        layout = accounts.TRANSFER if unpacked.decimals is None else accounts.TRANSFER_CHECKED
        return TransferEvent(
            source=context.get_token_account(layout.get(instruction.accounts, "source")),
            destination=context.get_token_account(layout.get(instruction.accounts, "destination")),
            amount=unpacked.amount,
            authority=layout.get(instruction.accounts, "authority"),
        )
