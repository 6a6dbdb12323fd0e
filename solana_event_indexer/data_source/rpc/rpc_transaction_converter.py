# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""Convert base64 `getBlock` transactions into instruction trees."""

from typing import List, NamedTuple, Optional
import base64

import base58
from loguru import logger
from solders.errors import BincodeError
from solders.transaction import VersionedTransaction

from solana_event_indexer.block.block import Block, Instruction, TokenBalance, Transaction
from solana_event_indexer.block.logs import is_completion, is_truncation, parse_invoke
from solana_event_indexer.data_source.rpc.model import (
    InnerInstructions,
    RpcBlock,
    TokenBalance as RpcTokenBalance,
    TransactionWrapper,
)


class InstructionIndices(NamedTuple):
    """Holds instruction data with account indices instead of resolved addresses."""
    program_id_index: int
    account_indices: List[int]
    data: bytes


class DecodedTransaction(NamedTuple):
    signatures: List[str]
    account_keys: List[str]
    instructions: List[InstructionIndices]


class SolanaTransactionDecoder:
    """Decoder for Solana transaction binary format."""

    @staticmethod
    def decode_transaction_with_solders(tx_data: str) -> DecodedTransaction:
        """Decode full transaction from base64 data using solders library."""
        tx_bytes = base64.b64decode(tx_data)
        logger.debug(f"Decoding transaction with solders: {len(tx_bytes)} bytes")

        versioned_tx = VersionedTransaction.from_bytes(tx_bytes)
        message = versioned_tx.message

        instructions = [
            InstructionIndices(
                program_id_index=instruction.program_id_index,
                account_indices=list(instruction.accounts),
                data=bytes(instruction.data),
            )
            for instruction in message.instructions
        ]

        return DecodedTransaction(
            signatures=[str(sig) for sig in versioned_tx.signatures],
            account_keys=[str(pubkey) for pubkey in message.account_keys],
            instructions=instructions,
        )


def resolve_account(account_keys: List[str], index: int) -> str:
    if index >= len(account_keys):
        raise ValueError(f"Account index {index} out of range for {len(account_keys)} keys")
    return account_keys[index]


def nest_inner_instructions(root: Instruction, inner: List[Instruction]) -> None:
    """Attaches the inner instructions of one top-level instruction to their invoking parent.

    Inner instructions come as a flat list in execution order; each one's
    parent is the closest preceding instruction one stack level above it.
    """
    stack = [root]
    for instruction in inner:
        while len(stack) > max(instruction.stack_height - 1, 1):
            stack.pop()
        stack[-1].inner_instructions.append(instruction)
        stack.append(instruction)


def assign_logs(instructions: List[Instruction], log_messages: Optional[List[str]]) -> None:
    """Splits the transaction log into the lines each instruction's own frame emitted.

    `Program <id> invoke [n]` opens the frame of the next instruction in
    execution order and `Program <id> success|failed` closes it. After a
    `Log truncated` line, every instruction still running or not yet
    started gets `logs = None`.
    """
    flat = [ix for root in instructions for ix in root.flatten()]

    if log_messages is None:
        for instruction in flat:
            instruction.logs = None
        return

    for instruction in flat:
        instruction.logs = []

    cursor = 0
    stack: List[Instruction] = []

    for line in log_messages:
        if is_truncation(line):
            for instruction in stack + flat[cursor:]:
                instruction.logs = None
            return

        invoke = parse_invoke(line)
        if invoke is not None:
            program_id, _ = invoke
            # precompiles run without an invoke line
            while cursor < len(flat) and flat[cursor].program_id != program_id:
                cursor += 1
            if cursor == len(flat):
                logger.debug(f"No instruction left for log line {line!r}")
                return
            frame = flat[cursor]
            cursor += 1
            frame.logs.append(line)
            stack.append(frame)
            continue

        if stack:
            stack[-1].logs.append(line)
            if is_completion(line):
                stack.pop()


class TransactionConverter:
    """Converts base64 block transactions to instruction trees."""

    @staticmethod
    def convert_block(block: RpcBlock, slot: int) -> Block:
        """Converts all transactions in a block, dropping the ones that cannot be decoded."""
        transactions = []
        converter = TransactionConverter()

        for i, tx_wrapper in enumerate(block.transactions):
            try:
                transactions.append(converter.convert_transaction_wrapper(tx_wrapper, slot, block.blockTime))
            except (ValueError, IndexError, BincodeError) as e:
                logger.warning(f"Failed to convert transaction {i} in slot {slot}: {e}")
                continue

        return Block(
            slot=slot,
            blockhash=block.blockhash,
            parent_slot=block.parentSlot,
            transactions=transactions,
            block_time=block.blockTime,
            previous_blockhash=block.previousBlockhash,
        )

    def convert_transaction_wrapper(
            self,
            tx_wrapper: TransactionWrapper,
            slot: int,
            block_time: Optional[int]
    ) -> Transaction:
        decoded = SolanaTransactionDecoder.decode_transaction_with_solders(tx_wrapper.transaction[0])
        meta = tx_wrapper.meta

        account_keys = list(decoded.account_keys)
        if meta is not None and meta.loadedAddresses is not None:
            account_keys += meta.loadedAddresses.writable + meta.loadedAddresses.readonly

        instructions = [
            Instruction(
                program_id=resolve_account(account_keys, ix.program_id_index),
                accounts=[resolve_account(account_keys, index) for index in ix.account_indices],
                data=ix.data,
                stack_height=1,
            )
            for ix in decoded.instructions
        ]

        if meta is not None:
            for group in meta.innerInstructions or []:
                nest_inner_instructions(
                    instructions[group.index],
                    self._convert_inner_instructions(group, account_keys),
                )

        assign_logs(instructions, meta.logMessages if meta is not None else None)

        return Transaction(
            signature=decoded.signatures[0] if decoded.signatures else "unknown_signature",
            instructions=instructions,
            error=meta.err if meta is not None else None,
            pre_token_balances=self._convert_token_balances(meta.preTokenBalances if meta else None, account_keys),
            post_token_balances=self._convert_token_balances(meta.postTokenBalances if meta else None, account_keys),
            slot=slot,
            block_time=block_time,
        )

    @staticmethod
    def _convert_inner_instructions(group: InnerInstructions, account_keys: List[str]) -> List[Instruction]:
        return [
            Instruction(
                program_id=resolve_account(account_keys, ix.programIdIndex),
                accounts=[resolve_account(account_keys, index) for index in ix.accounts],
                data=base58.b58decode(ix.data),
                # nodes that predate stack heights only record direct CPIs
                stack_height=ix.stackHeight if ix.stackHeight is not None else 2,
            )
            for ix in group.instructions
        ]

    @staticmethod
    def _convert_token_balances(
            balances: Optional[List[RpcTokenBalance]],
            account_keys: List[str]
    ) -> List[TokenBalance]:
        return [
            TokenBalance(
                account=resolve_account(account_keys, balance.accountIndex),
                mint=balance.mint,
                owner=balance.owner or "",
                amount=int(balance.uiTokenAmount.amount),
            )
            for balance in balances or []
        ]
