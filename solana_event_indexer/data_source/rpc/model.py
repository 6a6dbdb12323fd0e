# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""Response models for the `getBlock` JSON-RPC call with base64 transaction encoding.

Only the fields the converter reads are declared; msgspec skips the rest.
"""

from typing import Any, Generic, Literal, Optional, TypeVar

from msgspec import Struct, field

T = TypeVar('T')


class RPCRequest(Struct):
    method: str
    params: list[Any]
    jsonrpc: str = "2.0"
    id: int = 1


class RPCError(Struct):
    """RPC error structure."""
    code: int
    message: str
    data: Any = None


class Response(Struct, Generic[T]):
    """Generic RPC response wrapper."""
    jsonrpc: str
    id: int
    result: Optional[T] = None
    error: Optional[RPCError] = None

    @property
    def is_success(self) -> bool:
        """Check if response is successful."""
        return self.error is None


class UiTokenAmount(Struct):
    amount: str

    decimals: int


class TokenBalance(Struct):
    accountIndex: int

    mint: str

    uiTokenAmount: UiTokenAmount

    owner: str | None = None

    programId: str | None = None


class CompiledInnerInstruction(Struct):
    programIdIndex: int

    accounts: list[int]

    data: str
    """Base-58 encoded payload"""

    stackHeight: int | None = None


class InnerInstructions(Struct):
    index: int
    """Index of the top-level instruction that invoked these"""

    instructions: list[CompiledInnerInstruction]


class LoadedAddresses(Struct):
    writable: list[str] = field(default_factory=list)

    readonly: list[str] = field(default_factory=list)


class TransactionMeta(Struct):
    err: Any = None

    fee: int = 0

    innerInstructions: list[InnerInstructions] | None = field(default_factory=list)

    preTokenBalances: list[TokenBalance] | None = field(default_factory=list)

    postTokenBalances: list[TokenBalance] | None = field(default_factory=list)

    logMessages: list[str] | None = None
    """None when the node did not record logs"""

    loadedAddresses: LoadedAddresses | None = None


class TransactionWrapper(Struct):
    transaction: tuple[str, Literal["base64"]]

    meta: TransactionMeta | None

    version: Literal["legacy"] | int | None = None


class RpcBlock(Struct):
    blockhash: str

    previousBlockhash: str

    parentSlot: int  # u64

    transactions: list[TransactionWrapper]

    blockTime: int | None = None  # i64

    blockHeight: int | None = None  # u64


class BlockResponse(Response[RpcBlock]):
    """Typed response for block data."""
    pass


class SlotResponse(Response[int]):
    """Typed response for slot data."""
    pass
