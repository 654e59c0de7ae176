# Provider registry: built once at startup from settings, injected into the orchestrator.

from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .clients.base import ProviderClient
from .clients.compatible_client import deepseek_client, mistral_client
from .clients.gemini_client import GeminiClient
from .clients.openai_client import OpenAIClient
from .types import ProviderId

logger = logging.getLogger("qbot.registry")

PRIORITY: Tuple[ProviderId, ...] = (
    ProviderId.OPENAI,
    ProviderId.MISTRAL,
    ProviderId.GEMINI,
    ProviderId.DEEPSEEK,
)

# Each provider's own rescue order when it fails.
FALLBACK_ORDER: Mapping[ProviderId, Tuple[ProviderId, ...]] = {
    ProviderId.OPENAI: (ProviderId.MISTRAL, ProviderId.GEMINI, ProviderId.DEEPSEEK),
    ProviderId.GEMINI: (ProviderId.OPENAI, ProviderId.MISTRAL, ProviderId.DEEPSEEK),
    ProviderId.DEEPSEEK: (ProviderId.OPENAI, ProviderId.MISTRAL, ProviderId.GEMINI),
    ProviderId.MISTRAL: (ProviderId.OPENAI, ProviderId.GEMINI, ProviderId.DEEPSEEK),
}


def attempt_order(start: ProviderId) -> List[ProviderId]:
    """Start provider followed by its rescue order, each id exactly once."""
    order = [start]
    for pid in FALLBACK_ORDER.get(start, PRIORITY):
        if pid not in order:
            order.append(pid)
    for pid in PRIORITY:
        if pid not in order:
            order.append(pid)
    return order


class ProviderRegistry:
    def __init__(self, clients: Iterable[ProviderClient]):
        self._clients: Dict[ProviderId, ProviderClient] = {c.provider_id: c for c in clients}

    @classmethod
    def from_settings(cls, settings) -> "ProviderRegistry":
        timeout = settings.PROVIDER_TIMEOUT_SECONDS
        registry = cls([
            OpenAIClient(settings.OPENAI_API_KEY, settings.OPENAI_MODEL, timeout=timeout),
            GeminiClient(settings.GEMINI_API_KEY, settings.GEMINI_MODEL, settings.GEMINI_BASE_URL, timeout=timeout),
            deepseek_client(settings.DEEPSEEK_API_KEY, settings.DEEPSEEK_MODEL, settings.DEEPSEEK_BASE_URL, timeout),
            mistral_client(settings.MISTRAL_API_KEY, settings.MISTRAL_MODEL, settings.MISTRAL_BASE_URL, timeout),
        ])
        configured = registry.available()
        if configured:
            logger.info("Configured providers: %s", ", ".join(p.value for p in configured))
        else:
            logger.warning("No provider credentials set - every answer will be a static fallback")
        return registry

    def get(self, provider_id: ProviderId) -> Optional[ProviderClient]:
        return self._clients.get(provider_id)

    def is_configured(self, provider_id: Optional[ProviderId]) -> bool:
        client = self._clients.get(provider_id) if provider_id else None
        return bool(client and client.configured)

    def available(self) -> List[ProviderId]:
        return [pid for pid in PRIORITY if self.is_configured(pid)]
