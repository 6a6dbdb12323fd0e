# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""pump.fun coder for parsing bonding curve instructions."""

from __future__ import annotations
from typing import Optional

from loguru import logger

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.coders.base_coder import BaseCoder
from solana_event_indexer.coders.pumpfun import accounts
from solana_event_indexer.coders.pumpfun.events import (
    CreateEvent,
    InitializeEvent,
    PumpfunEventType,
    SetParamsEvent,
    SwapEvent,
    WithdrawEvent,
)
from solana_event_indexer.coders.pumpfun.instructions import (
    BuyData,
    CreateData,
    InitializeData,
    PumpfunInstructionData,
    SellData,
    SetParamsData,
    UnsupportedData,
    WithdrawData,
    decode_instruction,
)
from solana_event_indexer.coders.pumpfun.logs import find_trade_log
from solana_event_indexer.coders.spl_token.coder import SplTokenCoder
from solana_event_indexer.coders.system_program import parse_transfer_instruction as parse_system_transfer
from solana_event_indexer.context.token_ledger import TransactionContext
from solana_event_indexer.correlation import find_child
from solana_event_indexer.utils.known_programs import (
    PUMPFUN_PROGRAM_ID,
    SPL_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
)


class PumpfunCoder(BaseCoder):
    """Coder for pump.fun bonding curve instructions.

    Swaps are only partially described by the instruction itself: the SOL
    actually paid on a buy comes from the System transfer the curve invokes,
    the user's prior token balance from the nested token transfer, and the
    curve reserves from the TradeEvent the program logs.
    """

    def __init__(self, token_coder: Optional[SplTokenCoder] = None):
        super().__init__("Pumpfun", [PUMPFUN_PROGRAM_ID])
        self.token_coder = token_coder or SplTokenCoder()

    def decode(self, data: bytes) -> PumpfunInstructionData:
        return decode_instruction(data)

    def parse_instruction(
            self,
            instruction: Instruction,
            context: TransactionContext
    ) -> Optional[PumpfunEventType]:
        """Parse a pump.fun instruction."""
        unpacked = self.decode(instruction.data)
        ix_accounts = instruction.accounts

        match unpacked:
            case InitializeData():
                return InitializeEvent(user=accounts.INITIALIZE.get(ix_accounts, "user"))

            case SetParamsData():
                return SetParamsEvent(
                    user=accounts.SET_PARAMS.get(ix_accounts, "user"),
                    fee_recipient=unpacked.fee_recipient,
                    initial_virtual_token_reserves=unpacked.initial_virtual_token_reserves,
                    initial_virtual_sol_reserves=unpacked.initial_virtual_sol_reserves,
                    initial_real_token_reserves=unpacked.initial_real_token_reserves,
                    token_total_supply=unpacked.token_total_supply,
                    fee_basis_points=unpacked.fee_basis_points,
                )

            case CreateData():
                resolved = accounts.CREATE.resolve(ix_accounts)
                return CreateEvent(
                    user=resolved["user"],
                    name=unpacked.name,
                    symbol=unpacked.symbol,
                    uri=unpacked.uri,
                    mint=resolved["mint"],
                    bonding_curve=resolved["bonding_curve"],
                    associated_bonding_curve=resolved["associated_bonding_curve"],
                    metadata=resolved["metadata"],
                )

            case BuyData():
                return self._parse_buy(instruction, context, unpacked)

            case SellData():
                return self._parse_sell(instruction, context, unpacked)

            case WithdrawData():
                return WithdrawEvent(mint=accounts.WITHDRAW.get(ix_accounts, "mint"))

            case UnsupportedData(name=name):
                logger.debug(f"Skipping unsupported pump.fun instruction {name} in {context.signature}")
                return None

        return None

    def _parse_buy(
            self,
            instruction: Instruction,
            context: TransactionContext,
            buy: BuyData
    ) -> SwapEvent:
        resolved = accounts.BUY.resolve(instruction.accounts)

        system_transfer = parse_system_transfer(find_child(instruction, SYSTEM_PROGRAM_ID))

        token_transfer = self.token_coder.parse_transfer_instruction(
            find_child(instruction, SPL_TOKEN_PROGRAM_ID), context
        )

        trade = find_trade_log(instruction)

        # the nested transfer is applied to the ledger after this event is built,
        # so the latest post_balance is the balance right before it
        return SwapEvent(
            user=resolved["user"],
            mint=resolved["mint"],
            bonding_curve=resolved["bonding_curve"],
            sol_amount=system_transfer.lamports,
            token_amount=buy.amount,
            direction="token",
            virtual_sol_reserves=trade.virtual_sol_reserves if trade else None,
            virtual_token_reserves=trade.virtual_token_reserves if trade else None,
            real_sol_reserves=trade.real_sol_reserves if trade else None,
            real_token_reserves=trade.real_token_reserves if trade else None,
            user_token_pre_balance=token_transfer.destination.post_balance,
        )

    def _parse_sell(
            self,
            instruction: Instruction,
            context: TransactionContext,
            sell: SellData
    ) -> SwapEvent:
        resolved = accounts.SELL.resolve(instruction.accounts)

        trade = find_trade_log(instruction)

        token_transfer = self.token_coder.parse_transfer_instruction(
            find_child(instruction, SPL_TOKEN_PROGRAM_ID), context
        )

        return SwapEvent(
            user=resolved["user"],
            mint=resolved["mint"],
            bonding_curve=resolved["bonding_curve"],
            sol_amount=trade.sol_amount if trade else None,
            token_amount=sell.amount,
            direction="sol",
            virtual_sol_reserves=trade.virtual_sol_reserves if trade else None,
            virtual_token_reserves=trade.virtual_token_reserves if trade else None,
            real_sol_reserves=trade.real_sol_reserves if trade else None,
            real_token_reserves=trade.real_token_reserves if trade else None,
            user_token_pre_balance=token_transfer.source.post_balance,
        )
