# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Exception hierarchy shared by decoders, synthesizers and the indexer."""
from __future__ import annotations


class IndexerError(Exception):
    """Base class for every error raised by the indexer."""


class DecodeError(IndexerError):
    """An instruction payload or account list does not match its schema."""


class UnknownDiscriminant(DecodeError):
    def __init__(self, program: str, discriminant: bytes):
        self.program = program
        self.discriminant = discriminant
        super().__init__(f"Unknown {program} discriminant 0x{discriminant.hex()}")


class TruncatedPayload(DecodeError):
    def __init__(self, variant: str, size: int):
        self.variant = variant
        self.size = size
        super().__init__(f"Payload of {size} bytes is too short for {variant}")


class InvalidPayload(DecodeError):
    """The payload has the right size but carries an impossible value."""


class AccountIndexError(DecodeError):
    def __init__(self, variant: str, field: str, position: int, available: int):
        self.variant = variant
        self.field = field
        self.position = position
        self.available = available
        super().__init__(
            f"{variant} expects '{field}' at account position {position} "
            f"but the instruction only has {available} accounts"
        )


class CorrelationError(IndexerError):
    """A mandatory companion instruction could not be used."""


class NotFound(CorrelationError):
    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(f"No inner instruction with program_id == {program_id} found")


class LogError(IndexerError):
    """A structured log record is unavailable. Never fatal."""


class NoDataLog(LogError):
    def __init__(self):
        super().__init__("Couldn't find data log")


class TruncatedLogPayload(LogError):
    """The data log exists but cannot be decoded into a known record."""


class LogTruncated(LogError):
    def __init__(self):
        super().__init__("Failed to parse logs due to truncation")


class LedgerLookupError(IndexerError):
    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Token account {address} is not tracked in this transaction")


class TransactionProcessingError(IndexerError):
    """Wraps the fatal error of one transaction with its signature."""

    def __init__(self, signature: str, cause: IndexerError):
        self.signature = signature
        self.cause = cause
        super().__init__(f"Transaction {signature} error: {cause}")


class ConfigError(IndexerError):
    """Invalid configuration value."""


class RPCRequestError(IndexerError):
    """The JSON-RPC endpoint answered with an error object."""

    def __init__(self, method: str, error: dict):
        self.method = method
        self.error = error
        super().__init__(f"RPC call {method} failed: {error}")
