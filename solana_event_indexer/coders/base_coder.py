# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""Abstract base class for instruction coders."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Optional

from msgspec import Struct

from solana_event_indexer.block.block import Instruction
from solana_event_indexer.context.token_ledger import TransactionContext


class BaseCoder(ABC):
    """Abstract base class for instruction coders.

    Each coder is responsible for:
    1. Detecting if it can handle a specific instruction
    2. Decoding the raw instruction payload into a typed variant
    3. Mapping the variant, its accounts and its inner instructions to one normalized event
    """

    def __init__(self, name: str, program_ids: list[str]):
        """Initialize the coder.

        Args:
            name: Human-readable name for this coder
            program_ids: List of program IDs this coder can handle
        """
        self.name = name
        self.program_ids = set(program_ids)

    def can_handle(self, instruction: Instruction) -> bool:
        """Check if this coder can handle the given instruction."""
        return self.supports_program(instruction.program_id)

    def supports_program(self, program_id: str) -> bool:
        """Check if this coder supports a specific program ID."""
        return program_id in self.program_ids

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Decode a raw instruction payload into this program's instruction variant.

        Raises:
            DecodeError: if the payload does not match any known variant layout
        """
        pass

    @abstractmethod
    def parse_instruction(
            self,
            instruction: Instruction,
            context: TransactionContext
    ) -> Optional[Struct]:
        """Parse an instruction into its domain event.

        Args:
            instruction: The instruction to parse, with its inner instructions and logs
            context: Transaction context holding the running token ledger

        Returns:
            The event, or None for variants that carry no event

        Raises:
            IndexerError: if the instruction cannot be mapped to its event
        """
        pass


class CoderRegistry:
    """Registry mapping program IDs to the coder responsible for them.

    Each program ID has exactly one coder; instructions of any other program
    are ignored by the indexer.
    """

    def __init__(self, coders: Optional[list[BaseCoder]] = None):
        self._coders: list[BaseCoder] = []
        self._program_to_coder: dict[str, BaseCoder] = {}
        for coder in coders or []:
            self.register(coder)

    def register(self, coder: BaseCoder) -> None:
        """Register a new coder.

        Raises:
            ValueError: if another coder already handles one of its programs
        """
        for program_id in coder.program_ids:
            existing = self._program_to_coder.get(program_id)
            if existing is not None:
                raise ValueError(f"Program {program_id} is already handled by {existing.name}")

        self._coders.append(coder)
        for program_id in coder.program_ids:
            self._program_to_coder[program_id] = coder

    def get_coder_for_program(self, program_id: str) -> Optional[BaseCoder]:
        return self._program_to_coder.get(program_id)

    def get_coder_for_instruction(self, instruction: Instruction) -> Optional[BaseCoder]:
        coder = self.get_coder_for_program(instruction.program_id)
        if coder is not None and coder.can_handle(instruction):
            return coder
        return None

    def get_all_coders(self) -> list[BaseCoder]:
        return self._coders.copy()

    @property
    def program_ids(self) -> set[str]:
        return set(self._program_to_coder)
