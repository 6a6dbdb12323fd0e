# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


import aiohttp
import msgspec
from typing import Any, Dict, List, Optional
from loguru import logger
from msgspec.structs import asdict

from solana_event_indexer.block.block import Block
from solana_event_indexer.data_source.data_source import BaseDataSource
from solana_event_indexer.data_source.rpc.model import BlockResponse, RPCRequest, SlotResponse
from solana_event_indexer.data_source.rpc.rpc_transaction_converter import TransactionConverter
from solana_event_indexer.errors import RPCRequestError


_block_decoder = msgspec.json.Decoder(BlockResponse)


def parse_block_response(
        payload: bytes,
        slot: int,
        converter: Optional[TransactionConverter] = None
) -> Block:
    """Decodes a raw `getBlock` JSON-RPC response, as fetched or as saved to disk."""
    rpc_response = _block_decoder.decode(payload)

    if not rpc_response.is_success:
        logger.error(f"getBlock failed for slot {slot}: {rpc_response.error.message}")
        raise RPCRequestError("getBlock", asdict(rpc_response.error))

    rpc_block = rpc_response.result
    if rpc_block is None:
        raise RPCRequestError("getBlock", {"message": f"No block available for slot {slot}"})

    logger.success(
        f"Successfully retrieved block {rpc_block.blockhash} at slot {slot} "
        f"with {len(rpc_block.transactions)} transactions")

    block = (converter or TransactionConverter()).convert_block(rpc_block, slot)
    logger.info(f"Converted {len(block.transactions)} transactions to instruction trees")

    return block


class SolanaRPCDataSource(BaseDataSource):
    """Solana RPC data source implementation."""

    def __init__(self, rpc_url: Optional[str] = None, config: Optional[Dict[str, Any]] = None):
        """Initializes the Solana RPC data source.

        Raises:
            ValueError: if no RPC URL is given, either here or as config["rpc_url"]
        """
        super().__init__(config)
        self.rpc_url = rpc_url or self.config.get("rpc_url")
        if not self.rpc_url:
            raise ValueError("RPC URL must be provided either as parameter or SOLANA_RPC_URL environment variable")
        self.session: Optional[aiohttp.ClientSession] = None
        self.encoder = msgspec.json.Encoder()
        self.slot_decoder = msgspec.json.Decoder(SlotResponse)
        self.converter = TransactionConverter()

    async def connect(self) -> None:
        """Establishes connection to the Solana RPC endpoint."""
        if not self.session:
            self.session = aiohttp.ClientSession()
        self._connected = True
        logger.info(f"Connected to Solana RPC at {self.rpc_url}")

    async def disconnect(self) -> None:
        """Closes connection to the Solana RPC endpoint."""
        if self.session:
            await self.session.close()
            self.session = None
        self._connected = False

    async def _make_rpc_call(self, method: str, params: List[Any]) -> bytes:
        """Makes an RPC call to the Solana endpoint using msgspec."""
        if not self.session:
            raise RuntimeError("RPC client not connected")

        request = RPCRequest(method=method, params=params)
        payload_bytes = self.encoder.encode(request)

        headers = {"Content-Type": "application/json"}
        async with self.session.post(self.rpc_url, data=payload_bytes, headers=headers) as response:
            response.raise_for_status()
            return await response.read()

    async def get_block(self, slot: int) -> Block:
        """Retrieves the block at the given slot and builds its instruction trees."""
        logger.info(f"Fetching block at slot {slot}")
        result = await self._make_rpc_call("getBlock", [slot, {
            "encoding": "base64",
            "transactionDetails": "full",
            "rewards": False,
            "maxSupportedTransactionVersion": 0
        }])

        return parse_block_response(result, slot, self.converter)

    async def get_slot(self) -> int:
        """Get the current slot."""
        result = await self._make_rpc_call("getSlot", [])
        rpc_response = self.slot_decoder.decode(result)
        if not rpc_response.is_success:
            raise RPCRequestError("getSlot", asdict(rpc_response.error))
        return rpc_response.result

    async def health_check(self) -> bool:
        """Perform a health check on the RPC endpoint."""
        if not self.is_connected:
            return False

        try:
            await self.get_slot()
            return True
        except (aiohttp.ClientError, RPCRequestError, msgspec.DecodeError) as e:
            logger.error(e)
            return False
