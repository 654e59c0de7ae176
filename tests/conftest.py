# ===============================================
# tests/conftest.py
# Scripted provider clients and orchestrator factories.
# ===============================================

import pytest

from qbot.generate.clients.base import ProviderClient
from qbot.generate.conversations import ConversationStore
from qbot.generate.orchestrator import ResponseOrchestrator
from qbot.generate.registry import ProviderRegistry
from qbot.generate.tiers import TierPolicy


class FakeClient(ProviderClient):
    """Provider client that replays scripted replies (strings or exceptions)."""

    def __init__(self, provider_id, replies=None, api_key="test-key", supports_threads=False):
        super().__init__(api_key, model=f"{provider_id.value}-test")
        self.provider_id = provider_id
        self.supports_threads = supports_threads
        self.replies = list(replies or [])
        self.calls = []
        self.threads = []

    def create_thread(self):
        thread_id = f"thread-{len(self.threads) + 1}"
        self.threads.append(thread_id)
        return thread_id

    def _complete(self, prompt, params, handle):
        self.calls.append({"prompt": prompt, "params": params, "handle": handle})
        reply = self.replies.pop(0) if self.replies else "• Check the pump"
        if isinstance(reply, Exception):
            raise reply
        return reply, {"engine": self.provider_id.value, "model": self.model, "tokens": 42}


@pytest.fixture
def make_client():
    def _make(provider_id, replies=None, configured=True, threads=False):
        return FakeClient(
            provider_id,
            replies=replies,
            api_key="test-key" if configured else None,
            supports_threads=threads,
        )
    return _make


@pytest.fixture
def make_orchestrator():
    def _make(*clients, tiers=None, conversations=None, **kwargs):
        if conversations is None:
            conversations = ConversationStore()
        return ResponseOrchestrator(
            registry=ProviderRegistry(clients),
            tiers=tiers or TierPolicy(),
            conversations=conversations,
            **kwargs,
        )
    return _make
