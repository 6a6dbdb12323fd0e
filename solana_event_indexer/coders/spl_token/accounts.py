# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Account positions of SPL Token instructions, as read by the event mapping."""

from solana_event_indexer.coders.accounts import AccountLayout

INITIALIZE_MINT = AccountLayout("InitializeMint", {"mint": 0})

INITIALIZE_ACCOUNT = AccountLayout("InitializeAccount", {"account": 0})

# signers follow the rent sysvar in InitializeMultisig and the multisig itself in InitializeMultisig2
INITIALIZE_MULTISIG = AccountLayout("InitializeMultisig", {"multisig": 0}, rest_from=2)
INITIALIZE_MULTISIG_2 = AccountLayout("InitializeMultisig2", {"multisig": 0}, rest_from=1)

TRANSFER = AccountLayout("Transfer", {"source": 0, "destination": 1, "authority": 2})
TRANSFER_CHECKED = AccountLayout("TransferChecked", {"source": 0, "destination": 2, "authority": 3})

APPROVE = AccountLayout("Approve", {"source": 0, "delegate": 1})
APPROVE_CHECKED = AccountLayout("ApproveChecked", {"source": 0, "delegate": 2})

REVOKE = AccountLayout("Revoke", {"source": 0})

SET_AUTHORITY = AccountLayout("SetAuthority", {"mint": 0, "authority": 1})

MINT_TO = AccountLayout("MintTo", {"mint": 0, "destination": 1, "mint_authority": 2})

BURN = AccountLayout("Burn", {"source": 0, "authority": 2})

CLOSE_ACCOUNT = AccountLayout("CloseAccount", {"source": 0, "destination": 1})

# position 1 is the mint on-chain; kept as observed in the indexed event schema
FREEZE_ACCOUNT = AccountLayout("FreezeAccount", {"source": 0, "freeze_authority": 1})
THAW_ACCOUNT = AccountLayout("ThawAccount", {"source": 0, "freeze_authority": 1})

INITIALIZE_IMMUTABLE_OWNER = AccountLayout("InitializeImmutableOwner", {"account": 0})

SYNC_NATIVE = AccountLayout("SyncNative", {"account": 0})

# Ledger-side positions: InitializeAccount passes the owner as an account, 2 and 3 in the payload
INITIALIZE_ACCOUNT_LEDGER = AccountLayout("InitializeAccount", {"account": 0, "mint": 1, "owner": 2})
INITIALIZE_ACCOUNT_3_LEDGER = AccountLayout("InitializeAccount3", {"account": 0, "mint": 1})
