# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Normalized events emitted for pump.fun bonding curve instructions."""
from __future__ import annotations

from typing import Literal, Optional, Union

from msgspec import Struct


class PumpfunEvent(Struct, frozen=True, tag_field="type"):
    """Base class for pump.fun events, tagged by `type` when serialized."""


class InitializeEvent(PumpfunEvent, frozen=True, tag="initialize"):
    user: str


class SetParamsEvent(PumpfunEvent, frozen=True, tag="set_params"):
    user: str
    fee_recipient: str
    initial_virtual_token_reserves: int
    initial_virtual_sol_reserves: int
    initial_real_token_reserves: int
    token_total_supply: int
    fee_basis_points: int


class CreateEvent(PumpfunEvent, frozen=True, tag="create"):
    user: str
    name: str
    symbol: str
    uri: str
    mint: str
    bonding_curve: str
    associated_bonding_curve: str
    metadata: str


class SwapEvent(PumpfunEvent, frozen=True, tag="swap"):
    user: str
    mint: str
    bonding_curve: str
    token_amount: int

    direction: Literal["token", "sol"]
    """What the user receives: "token" for a buy, "sol" for a sell"""

    user_token_pre_balance: int
    """User token account balance before the curve's token transfer"""

    sol_amount: Optional[int] = None
    virtual_sol_reserves: Optional[int] = None
    virtual_token_reserves: Optional[int] = None
    real_sol_reserves: Optional[int] = None
    real_token_reserves: Optional[int] = None


class WithdrawEvent(PumpfunEvent, frozen=True, tag="withdraw"):
    mint: str


PumpfunEventType = Union[
    InitializeEvent,
    SetParamsEvent,
    CreateEvent,
    SwapEvent,
    WithdrawEvent,
]
