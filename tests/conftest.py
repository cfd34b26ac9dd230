"""
Shared test fixtures.

Provides: test settings, fake Replicate providers, store/orchestrator fixtures
"""

import asyncio

import pytest

from enhance_relay.config import Settings
from enhance_relay.orchestrator import EnhancementOrchestrator
from enhance_relay.store import JobStore


class FakeProvider:
    """Stands in for Replicate; records every input it is called with."""

    def __init__(self, output=None, error: Exception | None = None, hold: bool = False):
        self.output = output
        self.error = error
        # while held, run() keeps the job in processing until release() is called
        self.held = hold
        self.calls: list[dict] = []

    def release(self) -> None:
        self.held = False

    async def run(self, input: dict):
        self.calls.append(input)
        while self.held:
            await asyncio.sleep(0.01)
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def settings() -> Settings:
    return Settings(
        REPLICATE_API_TOKEN="r8_test_token",
        REPLICATE_MODEL="nightmareai/real-esrgan",
        REPLICATE_ENDPOINT="https://api.replicate.test",
        POLL_INTERVAL=0,
        POLL_MAX_WAIT=5,
        JOB_RETENTION_SECONDS=60,
    )


@pytest.fixture
def store() -> JobStore:
    return JobStore()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(output=["http://x/out.png"])


@pytest.fixture
def orchestrator(store: JobStore, provider: FakeProvider) -> EnhancementOrchestrator:
    return EnhancementOrchestrator(store=store, provider=provider, retention_seconds=60)
