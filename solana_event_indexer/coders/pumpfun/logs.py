# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Structured records pump.fun emits as `Program data:` logs.

The program emits Anchor events, prefixed with sha256("event:<Name>")[:8].
Only TradeEvent carries the reserve levels a swap needs; the other records
are decoded so that they can be told apart from malformed data.
"""
from __future__ import annotations

from typing import Union

from borsh_construct import Bool, CStruct, I64, String, U64
from construct import Bytes
from loguru import logger
from msgspec import Struct

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.block.logs import DataLog, parse_log
from solana_event_indexer.coders.borsh_utils import (
    anchor_discriminator,
    convert_b58_bytes_to_string,
    parse_layout,
)
from solana_event_indexer.errors import (
    DecodeError,
    LogTruncated,
    NoDataLog,
    TruncatedLogPayload,
)

DISCRIMINATOR_SIZE = 8


class LogDiscriminator:
    CREATE = anchor_discriminator("event", "CreateEvent")
    TRADE = anchor_discriminator("event", "TradeEvent")
    COMPLETE = anchor_discriminator("event", "CompleteEvent")
    SET_PARAMS = anchor_discriminator("event", "SetParamsEvent")


create_log_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "mint" / Bytes(32),
    "bonding_curve" / Bytes(32),
    "user" / Bytes(32),
)

trade_log_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "mint" / Bytes(32),
    "sol_amount" / U64,
    "token_amount" / U64,
    "is_buy" / Bool,
    "user" / Bytes(32),
    "timestamp" / I64,
    "virtual_sol_reserves" / U64,
    "virtual_token_reserves" / U64,
    "real_sol_reserves" / U64,
    "real_token_reserves" / U64,
)

complete_log_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "user" / Bytes(32),
    "mint" / Bytes(32),
    "bonding_curve" / Bytes(32),
    "timestamp" / I64,
)

set_params_log_layout = CStruct(
    "discriminator" / Bytes(DISCRIMINATOR_SIZE),
    "fee_recipient" / Bytes(32),
    "initial_virtual_token_reserves" / U64,
    "initial_virtual_sol_reserves" / U64,
    "initial_real_token_reserves" / U64,
    "token_total_supply" / U64,
    "fee_basis_points" / U64,
)


class CreateLog(Struct, frozen=True):
    name: str
    symbol: str
    uri: str
    mint: str
    bonding_curve: str
    user: str


class TradeLog(Struct, frozen=True):
    mint: str
    sol_amount: int
    token_amount: int
    is_buy: bool
    user: str
    timestamp: int
    virtual_sol_reserves: int
    virtual_token_reserves: int
    real_sol_reserves: int
    real_token_reserves: int


class CompleteLog(Struct, frozen=True):
    user: str
    mint: str
    bonding_curve: str
    timestamp: int


class SetParamsLog(Struct, frozen=True):
    fee_recipient: str
    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    token_total_supply: int
    fee_basis_points: int


PumpfunLog = Union[CreateLog, TradeLog, CompleteLog, SetParamsLog]


def decode_log(data: bytes) -> PumpfunLog:
    """Unpacks a pump.fun event record.

    Raises:
        TruncatedLogPayload: the record is too short, malformed or of an unknown kind
    """
    try:
        return _decode_log(data)
    except DecodeError as e:
        raise TruncatedLogPayload(f"Failed to unpack pump.fun log: {e}") from e


def _decode_log(data: bytes) -> PumpfunLog:
    if len(data) < DISCRIMINATOR_SIZE:
        raise TruncatedLogPayload(f"Log payload of {len(data)} bytes has no discriminator")

    discriminator = data[:DISCRIMINATOR_SIZE]

    match discriminator:
        case LogDiscriminator.CREATE:
            decoded = parse_layout(create_log_layout, data, "CreateEvent")
            return CreateLog(
                name=decoded.name,
                symbol=decoded.symbol,
                uri=decoded.uri,
                mint=convert_b58_bytes_to_string(decoded.mint),
                bonding_curve=convert_b58_bytes_to_string(decoded.bonding_curve),
                user=convert_b58_bytes_to_string(decoded.user),
            )
        case LogDiscriminator.TRADE:
            decoded = parse_layout(trade_log_layout, data, "TradeEvent")
            return TradeLog(
                mint=convert_b58_bytes_to_string(decoded.mint),
                sol_amount=decoded.sol_amount,
                token_amount=decoded.token_amount,
                is_buy=decoded.is_buy,
                user=convert_b58_bytes_to_string(decoded.user),
                timestamp=decoded.timestamp,
                virtual_sol_reserves=decoded.virtual_sol_reserves,
                virtual_token_reserves=decoded.virtual_token_reserves,
                real_sol_reserves=decoded.real_sol_reserves,
                real_token_reserves=decoded.real_token_reserves,
            )
        case LogDiscriminator.COMPLETE:
            decoded = parse_layout(complete_log_layout, data, "CompleteEvent")
            return CompleteLog(
                user=convert_b58_bytes_to_string(decoded.user),
                mint=convert_b58_bytes_to_string(decoded.mint),
                bonding_curve=convert_b58_bytes_to_string(decoded.bonding_curve),
                timestamp=decoded.timestamp,
            )
        case LogDiscriminator.SET_PARAMS:
            decoded = parse_layout(set_params_log_layout, data, "SetParamsEvent")
            return SetParamsLog(
                fee_recipient=convert_b58_bytes_to_string(decoded.fee_recipient),
                initial_virtual_token_reserves=decoded.initial_virtual_token_reserves,
                initial_virtual_sol_reserves=decoded.initial_virtual_sol_reserves,
                initial_real_token_reserves=decoded.initial_real_token_reserves,
                token_total_supply=decoded.token_total_supply,
                fee_basis_points=decoded.fee_basis_points,
            )
        case _:
            raise TruncatedLogPayload(f"Unknown pump.fun log discriminator 0x{discriminator.hex()}")


def extract_trade_log(instruction: Instruction) -> PumpfunLog:
    """Decodes the first data log emitted by the instruction itself.

    Raises:
        LogTruncated: the runtime truncated the logs, so their absence means nothing
        NoDataLog: no decodable `Program data:` line was emitted
        TruncatedLogPayload: the data log is not a valid pump.fun record
    """
    if instruction.logs is None:
        raise LogTruncated()

    for line in instruction.logs:
        log = parse_log(line)
        if isinstance(log, DataLog):
            data = log.data()
            if data is not None:
                return decode_log(data)

    raise NoDataLog()


def find_trade_log(instruction: Instruction) -> TradeLog | None:
    """TradeEvent of a swap, None when the log is missing, unreadable or of another kind."""
    try:
        record = extract_trade_log(instruction)
    except (LogTruncated, NoDataLog, TruncatedLogPayload) as e:
        logger.debug(f"No trade log for pump.fun instruction: {e}")
        return None

    if isinstance(record, TradeLog):
        return record
    return None
