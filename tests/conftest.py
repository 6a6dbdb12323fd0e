from __future__ import annotations

import pytest

from solana_event_indexer.coders.pumpfun.coder import PumpfunCoder
from solana_event_indexer.coders.spl_token.coder import SplTokenCoder
from solana_event_indexer.indexer import ErrorPolicy, EventIndexer


@pytest.fixture
def spl_coder() -> SplTokenCoder:
    return SplTokenCoder()


@pytest.fixture
def pump_coder() -> PumpfunCoder:
    return PumpfunCoder()


@pytest.fixture
def token_indexer(spl_coder: SplTokenCoder) -> EventIndexer:
    return EventIndexer([spl_coder])


@pytest.fixture
def pump_indexer(pump_coder: PumpfunCoder) -> EventIndexer:
    return EventIndexer([pump_coder])


@pytest.fixture
def skipping_indexer(spl_coder: SplTokenCoder) -> EventIndexer:
    return EventIndexer([spl_coder], error_policy=ErrorPolicy.SKIP)
