# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Helpers shared by the Borsh instruction and log layouts."""
from __future__ import annotations

import hashlib
from typing import Optional

import base58
from borsh_construct import CStruct
from construct import Container, ConstructError, StreamError

from solana_event_indexer.errors import InvalidPayload, TruncatedPayload


def convert_b58_bytes_to_string(b: bytes) -> str:
    """Convert bytes to base58 string."""
    return base58.b58encode(b).decode("utf-8")


def anchor_discriminator(namespace: str, name: str) -> bytes:
    """First 8 bytes of sha256("<namespace>:<name>"), as Anchor prefixes instructions and events."""
    return hashlib.sha256(f"{namespace}:{name}".encode("utf-8")).digest()[:8]


def parse_layout(layout: CStruct, data: bytes, variant: str) -> Container:
    """Parses `data` with `layout`, translating construct failures into decode errors.

    Trailing bytes are ignored so that payloads extended by later program
    versions still decode.
    """
    try:
        return layout.parse(data)
    except StreamError as e:
        raise TruncatedPayload(variant, len(data)) from e
    except (ConstructError, UnicodeDecodeError) as e:
        raise InvalidPayload(f"Malformed {variant} payload: {e}") from e


def parse_coption_pubkey(tag: int, value: Optional[bytes], variant: str) -> Optional[str]:
    """Resolves a COption<Pubkey> read as a u8 tag followed by an optional 32-byte key."""
    if tag == 0:
        return None
    if tag == 1:
        return convert_b58_bytes_to_string(value)
    raise InvalidPayload(f"Invalid COption tag {tag} in {variant} payload")
