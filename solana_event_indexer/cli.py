# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""
Command line entry point.

    solana-event-indexer slot 312345678 312345679
    solana-event-indexer --program spl_token file block.json --slot 312345678

Events are written to stdout as JSON, one block per line.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional

import aiohttp
import msgspec
from loguru import logger
from msgspec.structs import replace

from solana_event_indexer.coders.base_coder import BaseCoder
from solana_event_indexer.coders.pumpfun.coder import PumpfunCoder
from solana_event_indexer.coders.spl_token.coder import SplTokenCoder
from solana_event_indexer.config import PROGRAMS, IndexerSettings, load_settings
from solana_event_indexer.data_source.rpc.rpc_data_source import SolanaRPCDataSource, parse_block_response
from solana_event_indexer.errors import IndexerError
from solana_event_indexer.indexer import BlockEvents, ErrorPolicy, EventIndexer
from solana_event_indexer.utils.log_setup import configure_logging


def build_coder(program: str) -> BaseCoder:
    match program:
        case "pumpfun":
            return PumpfunCoder()
        case "spl_token":
            return SplTokenCoder()
        case _:
            raise ValueError(f"Unknown program {program!r}")


def build_indexer(settings: IndexerSettings) -> EventIndexer:
    return EventIndexer([build_coder(settings.program)], error_policy=settings.error_policy)


async def index_slots(
        settings: IndexerSettings,
        slots: Iterable[int],
        emit: Callable[[BlockEvents], None]
) -> None:
    indexer = build_indexer(settings)
    async with SolanaRPCDataSource(rpc_url=settings.rpc_url) as source:
        async for block in source.iter_blocks(slots):
            emit(indexer.process_block(block))


def write_block_events(result: BlockEvents) -> None:
    sys.stdout.write(msgspec.json.encode(result).decode("utf-8") + "\n")
    sys.stdout.flush()


def index_file(settings: IndexerSettings, path: Path, slot: int) -> BlockEvents:
    block = parse_block_response(path.read_bytes(), slot)
    return build_indexer(settings).process_block(block)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decode SPL Token and pump.fun events from Solana blocks")
    parser.add_argument("--program", choices=PROGRAMS, help="Program whose events are emitted")
    parser.add_argument("--error-policy", choices=[policy.value for policy in ErrorPolicy],
                        help="Abort on the first failing transaction or skip it")
    parser.add_argument("--rpc-url", help="Solana JSON-RPC endpoint (default: SOLANA_RPC_URL)")
    parser.add_argument("--log-level", help="loguru level (default: INDEXER_LOG_LEVEL or INFO)")

    commands = parser.add_subparsers(dest="command", required=True)

    slot_command = commands.add_parser("slot", help="Fetch blocks over RPC and index them")
    slot_command.add_argument("slots", type=int, nargs="+", metavar="slot")

    file_command = commands.add_parser("file", help="Index a saved getBlock JSON-RPC response")
    file_command.add_argument("path", type=Path)
    file_command.add_argument("--slot", type=int, default=-1, help="Slot of the saved block")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings()
    except IndexerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    settings = replace(
        settings,
        program=args.program or settings.program,
        error_policy=ErrorPolicy(args.error_policy) if args.error_policy else settings.error_policy,
        rpc_url=args.rpc_url or settings.rpc_url,
        log_level=args.log_level or settings.log_level,
    )
    configure_logging(settings.log_level, settings.log_file, settings.log_rotation)

    if args.command == "slot" and not settings.rpc_url:
        print("Error: set SOLANA_RPC_URL or pass --rpc-url to fetch blocks", file=sys.stderr)
        return 2

    try:
        if args.command == "slot":
            asyncio.run(index_slots(settings, args.slots, write_block_events))
        else:
            write_block_events(index_file(settings, args.path, args.slot))
    except (IndexerError, aiohttp.ClientError) as e:
        logger.error(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
