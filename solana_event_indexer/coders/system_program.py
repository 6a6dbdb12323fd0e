# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""System program transfers, read when correlating native SOL movements."""
from __future__ import annotations

from borsh_construct import CStruct, String, U32, U64
from construct import Bytes
from msgspec import Struct

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.coders.accounts import AccountLayout
from solana_event_indexer.coders.borsh_utils import convert_b58_bytes_to_string, parse_layout
from solana_event_indexer.errors import CorrelationError, TruncatedPayload, UnknownDiscriminant

TRANSFER = 2
TRANSFER_WITH_SEED = 11

transfer_layout = CStruct(
    "discriminator" / U32,
    "lamports" / U64,
)

transfer_with_seed_layout = CStruct(
    "discriminator" / U32,
    "lamports" / U64,
    "from_seed" / String,
    "from_owner" / Bytes(32),
)

TRANSFER_ACCOUNTS = AccountLayout("Transfer", {"source": 0, "destination": 1})
TRANSFER_WITH_SEED_ACCOUNTS = AccountLayout("TransferWithSeed", {"source": 0, "destination": 2})


class SystemTransfer(Struct, frozen=True):
    source: str
    destination: str
    lamports: int
    from_owner: str | None = None


def parse_transfer_instruction(instruction: Instruction) -> SystemTransfer:
    """Decodes a System program Transfer or TransferWithSeed.

    Raises:
        DecodeError: if the payload is malformed or of an unknown variant
        CorrelationError: if the instruction is a System instruction other than a transfer
    """
    data = instruction.data
    if len(data) < 4:
        raise TruncatedPayload("SystemInstruction", len(data))

    discriminator = int.from_bytes(data[:4], "little")

    match discriminator:
        case 2:
            decoded = parse_layout(transfer_layout, data, "Transfer")
            resolved = TRANSFER_ACCOUNTS.resolve(instruction.accounts)
            return SystemTransfer(
                source=resolved["source"],
                destination=resolved["destination"],
                lamports=decoded.lamports,
            )
        case 11:
            decoded = parse_layout(transfer_with_seed_layout, data, "TransferWithSeed")
            resolved = TRANSFER_WITH_SEED_ACCOUNTS.resolve(instruction.accounts)
            return SystemTransfer(
                source=resolved["source"],
                destination=resolved["destination"],
                lamports=decoded.lamports,
                from_owner=convert_b58_bytes_to_string(decoded.from_owner),
            )
        case _ if discriminator <= 12:
            raise CorrelationError(f"Expected a system transfer, found system instruction {discriminator}")
        case _:
            raise UnknownDiscriminant("system", data[:4])
