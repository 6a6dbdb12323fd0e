# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Positional account schemas.

Programs receive their accounts as a plain list, so every instruction
variant has a fixed contract of which account sits at which position.
These contracts are kept as named tables instead of index literals inside
the coders, and resolving one against a short account list fails loudly.
"""
from __future__ import annotations

from typing import Mapping

from solana_event_indexer.errors import AccountIndexError


class AccountLayout:
    """Named account positions for one instruction variant."""

    def __init__(self, variant: str, positions: Mapping[str, int], rest_from: int | None = None):
        """
        Args:
            variant: Instruction variant name, used in error messages
            positions: Mapping of field name to account position
            rest_from: Position from which the remaining accounts form a variable-length list
        """
        self.variant = variant
        self.positions = dict(positions)
        self.rest_from = rest_from

    def get(self, accounts: list[str], name: str) -> str:
        position = self.positions[name]
        if position >= len(accounts):
            raise AccountIndexError(self.variant, name, position, len(accounts))
        return accounts[position]

    def resolve(self, accounts: list[str]) -> dict[str, str]:
        """Returns every named account, raising AccountIndexError if any position is missing."""
        return {name: self.get(accounts, name) for name in self.positions}

    def rest(self, accounts: list[str]) -> list[str]:
        if self.rest_from is None:
            return []
        if self.rest_from > len(accounts):
            raise AccountIndexError(self.variant, "rest", self.rest_from, len(accounts))
        return list(accounts[self.rest_from:])

    def __repr__(self) -> str:
        return f"AccountLayout({self.variant!r}, {self.positions!r})"
