# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Binary layouts and decoded variants of pump.fun bonding curve instructions.

pump.fun is an Anchor program: every payload starts with the 8-byte
discriminator sha256("global:<instruction>")[:8], followed by the Borsh
encoded arguments.
"""
from __future__ import annotations

from borsh_construct import CStruct, String, U64
from construct import Bytes
from msgspec import Struct

from solana_event_indexer.coders.borsh_utils import (
    anchor_discriminator,
    convert_b58_bytes_to_string,
    parse_layout,
)
from solana_event_indexer.errors import TruncatedPayload, UnknownDiscriminant

DISCRIMINATOR_SIZE = 8


class Discriminator:
    INITIALIZE = anchor_discriminator("global", "initialize")
    SET_PARAMS = anchor_discriminator("global", "set_params")
    CREATE = anchor_discriminator("global", "create")
    BUY = anchor_discriminator("global", "buy")
    SELL = anchor_discriminator("global", "sell")
    WITHDRAW = anchor_discriminator("global", "withdraw")
    EXTEND_ACCOUNT = anchor_discriminator("global", "extend_account")
    MIGRATE = anchor_discriminator("global", "migrate")


set_params_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "fee_recipient" / Bytes(32),
    "initial_virtual_token_reserves" / U64,
    "initial_virtual_sol_reserves" / U64,
    "initial_real_token_reserves" / U64,
    "token_total_supply" / U64,
    "fee_basis_points" / U64,
)

create_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "name" / String,
    "symbol" / String,
    "uri" / String,
)

buy_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "amount" / U64,
    "max_sol_cost" / U64,
)

sell_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "amount" / U64,
    "min_sol_output" / U64,
)


class PumpfunInstructionData(Struct, frozen=True):
    """Base class for pump.fun instruction data."""


class InitializeData(PumpfunInstructionData, frozen=True):
    pass


class SetParamsData(PumpfunInstructionData, frozen=True):
    fee_recipient: str
    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    token_total_supply: int
    fee_basis_points: int


class CreateData(PumpfunInstructionData, frozen=True):
    name: str
    symbol: str
    uri: str


class BuyData(PumpfunInstructionData, frozen=True):
    amount: int
    max_sol_cost: int


class SellData(PumpfunInstructionData, frozen=True):
    amount: int
    min_sol_output: int


class WithdrawData(PumpfunInstructionData, frozen=True):
    pass


class UnsupportedData(PumpfunInstructionData, frozen=True):
    """Recognized instruction that produces no event."""
    name: str


def decode_instruction(data: bytes) -> PumpfunInstructionData:
    """Unpacks a raw pump.fun instruction payload.

    Raises:
        TruncatedPayload: the payload is shorter than its variant's layout
        UnknownDiscriminant: the 8-byte prefix is not a known instruction
        InvalidPayload: a string field is not valid UTF-8
    """
    if len(data) < DISCRIMINATOR_SIZE:
        raise TruncatedPayload("PumpfunInstruction", len(data))

    discriminator = data[:DISCRIMINATOR_SIZE]

    match discriminator:
        case Discriminator.INITIALIZE:
            return InitializeData()
        case Discriminator.SET_PARAMS:
            decoded = parse_layout(set_params_layout, data, "SetParams")
            return SetParamsData(
                fee_recipient=convert_b58_bytes_to_string(decoded.fee_recipient),
                initial_virtual_token_reserves=decoded.initial_virtual_token_reserves,
                initial_virtual_sol_reserves=decoded.initial_virtual_sol_reserves,
                initial_real_token_reserves=decoded.initial_real_token_reserves,
                token_total_supply=decoded.token_total_supply,
                fee_basis_points=decoded.fee_basis_points,
            )
        case Discriminator.CREATE:
            decoded = parse_layout(create_layout, data, "Create")
            return CreateData(name=decoded.name, symbol=decoded.symbol, uri=decoded.uri)
        case Discriminator.BUY:
            decoded = parse_layout(buy_layout, data, "Buy")
            return BuyData(amount=decoded.amount, max_sol_cost=decoded.max_sol_cost)
        case Discriminator.SELL:
            decoded = parse_layout(sell_layout, data, "Sell")
            return SellData(amount=decoded.amount, min_sol_output=decoded.min_sol_output)
        case Discriminator.WITHDRAW:
            return WithdrawData()
        case Discriminator.EXTEND_ACCOUNT:
            return UnsupportedData(name="extend_account")
        case Discriminator.MIGRATE:
            return UnsupportedData(name="migrate")
        case _:
            raise UnknownDiscriminant("pumpfun", discriminator)
