# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Lookup of companion instructions invoked by a higher-level instruction."""
from __future__ import annotations

from typing import Optional

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.errors import NotFound


def find_child_or_none(instruction: Instruction, program_id: str) -> Optional[Instruction]:
    """First direct inner instruction owned by `program_id`, in execution order.

    Deeper descendants are not searched.
    """
    return next(
        (inner for inner in instruction.inner_instructions if inner.program_id == program_id),
        None,
    )


def find_child(instruction: Instruction, program_id: str) -> Instruction:
    """Same as find_child_or_none, for companions the caller cannot do without.

    Raises:
        NotFound: if no direct inner instruction belongs to `program_id`
    """
    child = find_child_or_none(instruction, program_id)
    if child is None:
        raise NotFound(program_id)
    return child
