# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Defines the block, transaction and instruction tree structures consumed by the coders."""
from __future__ import annotations

from typing import Any, Iterator, Optional

from msgspec import Struct, field


class Instruction(Struct):
    program_id: str
    """Base-58 address of the program executing this instruction"""

    accounts: list[str]
    """
    Resolved account addresses, in the order the program receives them.
    Coders read them by position, so the order is part of each program's schema.
    """

    data: bytes
    """Raw instruction payload"""

    inner_instructions: list[Instruction] = field(default_factory=list)
    """Instructions invoked by this one (CPI), in execution order"""

    logs: Optional[list[str]] = field(default_factory=list)
    """
    Log lines emitted while this instruction's own frame was on top of the call stack.
    None when the runtime truncated the transaction logs before this instruction finished.
    """

    stack_height: int = 1
    """Invocation depth, 1 for top-level instructions"""

    def flatten(self) -> Iterator[Instruction]:
        """Yields this instruction followed by its descendants, in execution (pre-)order."""
        yield self
        for inner in self.inner_instructions:
            yield from inner.flatten()


class TokenBalance(Struct, frozen=True):
    account: str
    mint: str
    owner: str
    amount: int


class Transaction(Struct):
    signature: str
    """First signature of the transaction, used as its id"""

    instructions: list[Instruction]
    """Top-level instructions, each owning its inner instructions"""

    error: Any = None
    """Transaction error reported by the chain, None on success"""

    pre_token_balances: list[TokenBalance] = field(default_factory=list)

    post_token_balances: list[TokenBalance] = field(default_factory=list)

    slot: int = -1

    block_time: int | None = None

    @property
    def is_successful(self) -> bool:
        return self.error is None

    @property
    def all_instructions(self) -> list[Instruction]:
        """Gets all instructions (outer + inner) in execution order."""
        return [ix for root in self.instructions for ix in root.flatten()]


class Block(Struct):
    slot: int

    blockhash: str

    parent_slot: int

    transactions: list[Transaction]

    block_time: int | None = None
    """Estimated production time, as Unix timestamp, None if not available"""

    previous_blockhash: str | None = None
