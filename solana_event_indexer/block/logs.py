# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Classification of runtime log lines."""
from __future__ import annotations

import base64
import binascii
import re
from typing import Optional, Union

from msgspec import Struct

DATA_LOG_PREFIX = "Program data: "
TRUNCATED_LOG = "Log truncated"

INVOKE_RE = re.compile(r"^Program (\w+) invoke \[(\d+)\]$")
COMPLETE_RE = re.compile(r"^Program (\w+) (success|failed: .*)$")


class DataLog(Struct, frozen=True):
    """`Program data:` line emitted through sol_log_data, e.g. by Anchor's emit!."""
    payload: str

    def data(self) -> Optional[bytes]:
        """Decodes the first base64 slice, None if it is not valid base64."""
        chunks = self.payload.split()
        if not chunks:
            return None
        try:
            return base64.b64decode(chunks[0], validate=True)
        except (binascii.Error, ValueError):
            return None


class TextLog(Struct, frozen=True):
    text: str


Log = Union[DataLog, TextLog]


def parse_log(line: str) -> Log:
    if line.startswith(DATA_LOG_PREFIX):
        return DataLog(payload=line[len(DATA_LOG_PREFIX):])
    return TextLog(text=line)


def parse_invoke(line: str) -> Optional[tuple[str, int]]:
    """Returns (program_id, depth) for `Program <id> invoke [<depth>]` lines."""
    match = INVOKE_RE.match(line)
    if match is None:
        return None
    return match.group(1), int(match.group(2))


def is_completion(line: str) -> bool:
    """True for the `success` / `failed` line closing a program frame."""
    return COMPLETE_RE.match(line) is not None


def is_truncation(line: str) -> bool:
    return line == TRUNCATED_LOG
