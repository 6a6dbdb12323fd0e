# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Per-transaction running view of token account balances."""
from __future__ import annotations

from loguru import logger
from msgspec import Struct

from solana_event_indexer.block.block import Instruction, Transaction
from solana_event_indexer.coders.spl_token import accounts
from solana_event_indexer.coders.spl_token.instructions import (
    AuthorityType,
    BurnData,
    CloseAccountData,
    InitializeAccountData,
    MintToData,
    SetAuthorityData,
    TransferData,
    decode_instruction,
)
from solana_event_indexer.errors import UnknownDiscriminant, LedgerLookupError
from solana_event_indexer.utils.known_programs import SPL_TOKEN_PROGRAM_ID


class TokenAccount(Struct, frozen=True):
    """Snapshot of a token account at the point it was looked up.

    pre_balance and post_balance surround the most recent ledger update
    that touched the account; both equal the transaction pre-balance
    until an instruction moves tokens in or out.
    """
    address: str
    owner: str
    mint: str
    pre_balance: int
    post_balance: int


class TransactionContext:
    """Context information available to coders during parsing.

    Holds the running token ledger of one transaction. The indexer calls
    update_balance once per instruction, in execution order, before the
    instruction itself is handed to a coder. Coders only read.
    """

    def __init__(self, transaction: Transaction):
        self.signature = transaction.signature
        self.slot = transaction.slot
        self.block_time = transaction.block_time
        self._token_accounts: dict[str, TokenAccount] = {}

        for balance in transaction.pre_token_balances:
            self._token_accounts[balance.account] = TokenAccount(
                address=balance.account,
                owner=balance.owner,
                mint=balance.mint,
                pre_balance=balance.amount,
                post_balance=balance.amount,
            )

        # accounts created inside the transaction start empty
        for balance in transaction.post_token_balances:
            if balance.account not in self._token_accounts:
                self._token_accounts[balance.account] = TokenAccount(
                    address=balance.account,
                    owner=balance.owner,
                    mint=balance.mint,
                    pre_balance=0,
                    post_balance=0,
                )

    def get_token_account(self, address: str) -> TokenAccount:
        """Returns the current snapshot of a tracked token account.

        Raises:
            LedgerLookupError: if the address is not a token account of this transaction
        """
        try:
            return self._token_accounts[address]
        except KeyError:
            raise LedgerLookupError(address) from None

    def has_token_account(self, address: str) -> bool:
        return address in self._token_accounts

    def update_balance(self, instruction: Instruction) -> None:
        """Applies the balance effect of an SPL Token instruction to the ledger.

        Instructions of other programs and unknown token instructions leave
        the ledger untouched. Malformed token payloads raise DecodeError.
        """
        if instruction.program_id != SPL_TOKEN_PROGRAM_ID:
            return

        try:
            unpacked = decode_instruction(instruction.data)
        except UnknownDiscriminant as e:
            logger.debug(f"Ledger ignores token instruction in {self.signature}: {e}")
            return

        ix_accounts = instruction.accounts

        match unpacked:
            case TransferData(amount=amount, decimals=decimals):
                layout = accounts.TRANSFER if decimals is None else accounts.TRANSFER_CHECKED
                self._move(layout.get(ix_accounts, "source"), -amount)
                self._move(layout.get(ix_accounts, "destination"), amount)
            case MintToData(amount=amount):
                self._move(accounts.MINT_TO.get(ix_accounts, "destination"), amount)
            case BurnData(amount=amount):
                self._move(accounts.BURN.get(ix_accounts, "source"), -amount)
            case InitializeAccountData(owner=owner):
                self._initialize_account(ix_accounts, owner)
            case SetAuthorityData(authority_type=AuthorityType.ACCOUNT_OWNER, new_authority=new_owner):
                address = accounts.SET_AUTHORITY.get(ix_accounts, "mint")
                if new_owner is not None and address in self._token_accounts:
                    current = self._token_accounts[address]
                    self._token_accounts[address] = TokenAccount(
                        address=address,
                        owner=new_owner,
                        mint=current.mint,
                        pre_balance=current.pre_balance,
                        post_balance=current.post_balance,
                    )
            case CloseAccountData():
                address = accounts.CLOSE_ACCOUNT.get(ix_accounts, "source")
                if address in self._token_accounts:
                    self._set_balance(address, 0)

    def _initialize_account(self, ix_accounts: list[str], owner: str | None) -> None:
        if owner is None:
            resolved = accounts.INITIALIZE_ACCOUNT_LEDGER.resolve(ix_accounts)
        else:
            resolved = accounts.INITIALIZE_ACCOUNT_3_LEDGER.resolve(ix_accounts)
            resolved["owner"] = owner

        self._token_accounts[resolved["account"]] = TokenAccount(
            address=resolved["account"],
            owner=resolved["owner"],
            mint=resolved["mint"],
            pre_balance=0,
            post_balance=0,
        )

    def _move(self, address: str, delta: int) -> None:
        current = self._token_accounts.get(address)
        if current is None:
            logger.debug(f"Ledger skips untracked token account {address} in {self.signature}")
            return
        self._set_balance(address, current.post_balance + delta)

    def _set_balance(self, address: str, balance: int) -> None:
        current = self._token_accounts[address]
        self._token_accounts[address] = TokenAccount(
            address=address,
            owner=current.owner,
            mint=current.mint,
            pre_balance=current.post_balance,
            post_balance=balance,
        )
