# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Turns blocks and transactions into the events of the registered programs."""
from __future__ import annotations

from enum import Enum
from typing import Union

from loguru import logger
from msgspec import Struct, field

from solana_event_indexer.block.block import Block, Transaction
from solana_event_indexer.coders.base_coder import BaseCoder, CoderRegistry
from solana_event_indexer.coders.pumpfun.events import PumpfunEventType
from solana_event_indexer.coders.spl_token.events import SplTokenEventType
from solana_event_indexer.context.token_ledger import TransactionContext
from solana_event_indexer.errors import IndexerError, TransactionProcessingError, UnknownDiscriminant
from solana_event_indexer.utils.known_programs import get_program_by_name

Event = Union[SplTokenEventType, PumpfunEventType]


class ErrorPolicy(str, Enum):
    ABORT = "abort"
    """Stop at the first transaction that fails to decode"""

    SKIP = "skip"
    """Log the failing transaction, leave it out and keep going"""


class TransactionEvents(Struct):
    signature: str
    events: list[Event]


class BlockEvents(Struct):
    slot: int
    transactions: list[TransactionEvents] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    """Signatures of transactions dropped under ErrorPolicy.SKIP"""


class EventIndexer:
    """Runs the registered coders over every instruction of a transaction.

    Instructions are visited in execution order and the token ledger is
    advanced for each of them before any coder reads it, so the work on
    one transaction is strictly sequential. Transactions share nothing and
    the indexer keeps no state between calls.
    """

    def __init__(
            self,
            coders: Union[CoderRegistry, list[BaseCoder]],
            error_policy: ErrorPolicy = ErrorPolicy.ABORT
    ):
        self.registry = coders if isinstance(coders, CoderRegistry) else CoderRegistry(coders)
        self.error_policy = error_policy

    def process_transaction(self, transaction: Transaction) -> list[Event]:
        """Returns the events of a transaction, in instruction execution order.

        Raises:
            TransactionProcessingError: if an instruction of a registered program cannot be mapped
        """
        if not transaction.is_successful:
            return []

        events = []
        context = TransactionContext(transaction)

        try:
            for instruction in transaction.all_instructions:
                context.update_balance(instruction)

                coder = self.registry.get_coder_for_instruction(instruction)
                if coder is None:
                    continue

                # only the instruction's own opcode may be unknown; failures
                # decoding its companions below fail the transaction
                try:
                    coder.decode(instruction.data)
                except UnknownDiscriminant as e:
                    logger.debug(
                        f"Dropping {get_program_by_name(instruction.program_id)} instruction "
                        f"in {transaction.signature}: {e}"
                    )
                    continue

                event = coder.parse_instruction(instruction, context)
                if event is not None:
                    events.append(event)
        except IndexerError as e:
            raise TransactionProcessingError(transaction.signature, e) from e

        return events

    def process_block(self, block: Block) -> BlockEvents:
        """Collects the events of every transaction of a block.

        Transactions without events are left out of the result.

        Raises:
            TransactionProcessingError: for the first failing transaction under ErrorPolicy.ABORT
        """
        result = BlockEvents(slot=block.slot)

        for transaction in block.transactions:
            try:
                events = self.process_transaction(transaction)
            except TransactionProcessingError as e:
                if self.error_policy is ErrorPolicy.ABORT:
                    raise
                logger.warning(f"Skipping transaction in slot {block.slot}: {e}")
                result.skipped.append(e.signature)
                continue

            if events:
                result.transactions.append(TransactionEvents(signature=transaction.signature, events=events))

        logger.info(
            f"Indexed slot {block.slot}: {sum(len(tx.events) for tx in result.transactions)} events "
            f"in {len(result.transactions)} of {len(block.transactions)} transactions"
        )
        return result
