# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Account positions of pump.fun instructions, as read by the event mapping."""

from solana_event_indexer.coders.accounts import AccountLayout

INITIALIZE = AccountLayout("Initialize", {"user": 0})

SET_PARAMS = AccountLayout("SetParams", {"user": 0})

# associated_bonding_curve shares position 2 with bonding_curve in the indexed schema,
# although the program passes the associated token account at 3
CREATE = AccountLayout("Create", {
    "mint": 0,
    "bonding_curve": 2,
    "associated_bonding_curve": 2,
    "metadata": 6,
    "user": 7,
})

BUY = AccountLayout("Buy", {"mint": 2, "bonding_curve": 3, "user": 6})

SELL = AccountLayout("Sell", {"mint": 2, "bonding_curve": 3, "user": 6})

WITHDRAW = AccountLayout("Withdraw", {"mint": 2})
