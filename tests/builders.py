"""Payload and transaction builders shared by the test modules."""

from __future__ import annotations

import base64
import struct
from typing import Optional

import msgspec

from solana_event_indexer.block.block import Instruction, TokenBalance, Transaction
from solana_event_indexer.coders.pumpfun.instructions import Discriminator
from solana_event_indexer.coders.pumpfun.logs import LogDiscriminator
from solana_event_indexer.utils.known_programs import (
    PUMPFUN_PROGRAM_ID,
    SPL_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
)


def pubkey_bytes(seed: int) -> bytes:
    return bytes([seed]) * 32


def borsh_string(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


# SPL Token payloads

def spl_transfer(amount: int) -> bytes:
    return bytes([3]) + struct.pack("<Q", amount)


def spl_transfer_checked(amount: int, decimals: int) -> bytes:
    return bytes([12]) + struct.pack("<QB", amount, decimals)


def spl_mint_to(amount: int) -> bytes:
    return bytes([7]) + struct.pack("<Q", amount)


def spl_burn(amount: int) -> bytes:
    return bytes([8]) + struct.pack("<Q", amount)


# System program payloads

def system_transfer(lamports: int) -> bytes:
    return struct.pack("<IQ", 2, lamports)


# pump.fun payloads

def pump_buy(amount: int, max_sol_cost: int) -> bytes:
    return Discriminator.BUY + struct.pack("<QQ", amount, max_sol_cost)


def pump_sell(amount: int, min_sol_output: int) -> bytes:
    return Discriminator.SELL + struct.pack("<QQ", amount, min_sol_output)


def pump_create(name: str, symbol: str, uri: str) -> bytes:
    return Discriminator.CREATE + borsh_string(name) + borsh_string(symbol) + borsh_string(uri)


def trade_log_payload(
        sol_amount: int = 1_000_000,
        token_amount: int = 5_000,
        is_buy: bool = True,
        timestamp: int = 1_700_000_000,
        virtual_sol_reserves: int = 30_000_000_000,
        virtual_token_reserves: int = 1_000_000_000_000,
        real_sol_reserves: int = 2_000_000_000,
        real_token_reserves: int = 700_000_000_000,
) -> bytes:
    return (
        LogDiscriminator.TRADE
        + pubkey_bytes(1)
        + struct.pack("<QQ?", sol_amount, token_amount, is_buy)
        + pubkey_bytes(2)
        + struct.pack(
            "<qQQQQ",
            timestamp,
            virtual_sol_reserves,
            virtual_token_reserves,
            real_sol_reserves,
            real_token_reserves,
        )
    )


def data_log(payload: bytes) -> str:
    return "Program data: " + base64.b64encode(payload).decode("ascii")


# Instruction trees

def token_ix(data: bytes, accounts: list[str], stack_height: int = 1) -> Instruction:
    return Instruction(program_id=SPL_TOKEN_PROGRAM_ID, accounts=accounts, data=data, stack_height=stack_height)


def system_ix(data: bytes, accounts: list[str], stack_height: int = 2) -> Instruction:
    return Instruction(program_id=SYSTEM_PROGRAM_ID, accounts=accounts, data=data, stack_height=stack_height)


def pump_ix(
        data: bytes,
        accounts: list[str],
        inner: Optional[list[Instruction]] = None,
        logs: Optional[list[str]] = None,
) -> Instruction:
    return Instruction(
        program_id=PUMPFUN_PROGRAM_ID,
        accounts=accounts,
        data=data,
        inner_instructions=inner or [],
        logs=logs,
    )


def swap_accounts() -> list[str]:
    """Accounts of a pump.fun buy/sell: global, fee, mint, curve, curve ATA, user ATA, user, ..."""
    return ["global", "fee_recipient", "mint", "curve", "curve_ata", "user_ata", "user", "system", "token", "rent"]


def balance(account: str, amount: int, mint: str = "mint", owner: str = "owner") -> TokenBalance:
    return TokenBalance(account=account, mint=mint, owner=owner, amount=amount)


def transaction(
        instructions: list[Instruction],
        pre: Optional[list[TokenBalance]] = None,
        post: Optional[list[TokenBalance]] = None,
        signature: str = "sig",
        error=None,
) -> Transaction:
    return Transaction(
        signature=signature,
        instructions=instructions,
        error=error,
        pre_token_balances=pre or [],
        post_token_balances=post or [],
    )


# getBlock responses

def signed_token_transfer(amount: int):
    """Signs a legacy transaction holding one SPL Token transfer.

    Returns (base64 transaction, signature, source, destination, authority).
    """
    from solders.hash import Hash
    from solders.instruction import AccountMeta, Instruction as SoldersInstruction
    from solders.keypair import Keypair
    from solders.message import Message
    from solders.pubkey import Pubkey
    from solders.transaction import VersionedTransaction

    authority = Keypair()
    source = Pubkey.new_unique()
    destination = Pubkey.new_unique()

    ix = SoldersInstruction(
        Pubkey.from_string(SPL_TOKEN_PROGRAM_ID),
        spl_transfer(amount),
        [
            AccountMeta(source, False, True),
            AccountMeta(destination, False, True),
            AccountMeta(authority.pubkey(), True, False),
        ],
    )
    message = Message.new_with_blockhash([ix], authority.pubkey(), Hash.default())
    tx = VersionedTransaction(message, [authority])

    return (
        base64.b64encode(bytes(tx)).decode("ascii"),
        str(tx.signatures[0]),
        str(source),
        str(destination),
        str(authority.pubkey()),
    )


def block_response(transactions: list[dict], blockhash: str = "hash", parent_slot: int = 99) -> bytes:
    return msgspec.json.encode({
        "jsonrpc": "2.0",
        "id": 1,
        "result": {
            "blockhash": blockhash,
            "previousBlockhash": "parent_hash",
            "parentSlot": parent_slot,
            "blockTime": 1_700_000_000,
            "transactions": transactions,
        },
    })


def transaction_wrapper(
        tx_base64: str,
        account_keys: list[str],
        balances: list[tuple[str, int, int]],
        log_messages: Optional[list[str]] = None,
        err=None,
) -> dict:
    """Wraps a signed transaction the way getBlock returns it.

    `balances` lists (account, pre_amount, post_amount); indices are looked
    up in `account_keys`, which must be in the message's key order.
    """
    def token_balances(position: int) -> list[dict]:
        return [
            {
                "accountIndex": account_keys.index(entry[0]),
                "mint": "mint",
                "owner": "owner",
                "uiTokenAmount": {"amount": str(entry[position]), "decimals": 6},
            }
            for entry in balances
        ]

    return {
        "transaction": [tx_base64, "base64"],
        "meta": {
            "err": err,
            "fee": 5000,
            "innerInstructions": [],
            "preTokenBalances": token_balances(1),
            "postTokenBalances": token_balances(2),
            "logMessages": log_messages,
        },
        "version": "legacy",
    }
