# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""List of known solana programs"""

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
SPL_TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
PUMPFUN_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"

KNOWN_PROGRAMS = {
    "system": SYSTEM_PROGRAM_ID,
    "spl_token": SPL_TOKEN_PROGRAM_ID,
    "pump_fun": PUMPFUN_PROGRAM_ID,
}


def get_program_by_name(pubkey: str) -> str:
    for name, key in KNOWN_PROGRAMS.items():
        if key == pubkey:
            return name
    return pubkey
