# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Block sources the indexer reads from."""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Dict, Iterable, Optional

from solana_event_indexer.block.block import Block


class BaseDataSource(ABC):
    """Source of blocks whose transactions are already built into instruction trees.

    Sources are async context managers: entering connects, leaving
    disconnects, also when indexing failed in between.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def get_block(self, slot: int) -> Block:
        """Fetches the block produced at `slot`.

        Raises:
            RPCRequestError: if the source has no block for the slot
        """
        pass

    async def iter_blocks(self, slots: Iterable[int]) -> AsyncIterator[Block]:
        """Fetches the given slots one after the other, in the order given."""
        for slot in slots:
            yield await self.get_block(slot)

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def health_check(self) -> bool:
        return self.is_connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
