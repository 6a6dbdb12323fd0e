# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Runtime settings read from the environment (and a .env file when present).

- SOLANA_RPC_URL: JSON-RPC endpoint used to fetch blocks
- INDEXER_PROGRAM: pumpfun | spl_token (default: pumpfun)
- INDEXER_ERROR_POLICY: abort | skip (default: abort)
- INDEXER_LOG_LEVEL: loguru level name (default: INFO)
- INDEXER_LOG_FILE: optional path of a rotating log file
"""
from __future__ import annotations

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from msgspec import Struct

from solana_event_indexer.errors import ConfigError
from solana_event_indexer.indexer import ErrorPolicy

Program = Literal["pumpfun", "spl_token"]
PROGRAMS: tuple[str, ...] = ("pumpfun", "spl_token")


class IndexerSettings(Struct, frozen=True):
    rpc_url: Optional[str] = None
    program: Program = "pumpfun"
    error_policy: ErrorPolicy = ErrorPolicy.ABORT
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "10 MB"


def load_settings() -> IndexerSettings:
    """Builds the settings from environment variables.

    Raises:
        ConfigError: if a variable holds an unsupported value
    """
    load_dotenv()

    program = os.getenv("INDEXER_PROGRAM", "pumpfun").strip().lower()
    if program not in PROGRAMS:
        raise ConfigError(f"INDEXER_PROGRAM must be one of {', '.join(PROGRAMS)}, got {program!r}")

    raw_policy = os.getenv("INDEXER_ERROR_POLICY", ErrorPolicy.ABORT.value).strip().lower()
    try:
        error_policy = ErrorPolicy(raw_policy)
    except ValueError:
        raise ConfigError(f"INDEXER_ERROR_POLICY must be 'abort' or 'skip', got {raw_policy!r}") from None

    return IndexerSettings(
        rpc_url=os.getenv("SOLANA_RPC_URL") or None,
        program=program,
        error_policy=error_policy,
        log_level=os.getenv("INDEXER_LOG_LEVEL", "INFO").strip().upper(),
        log_file=os.getenv("INDEXER_LOG_FILE") or None,
    )
