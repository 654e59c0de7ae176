# Start-provider selection strategies. The orchestrator only asks for a
# starting point; fallback ordering is not their concern.

from __future__ import annotations
from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .registry import PRIORITY, ProviderRegistry
from .types import GenerationRequest, ProviderId


class SelectionStrategy(Protocol):
    def choose(self, request: GenerationRequest, registry: ProviderRegistry) -> ProviderId:
        ...


class PreferredProviderStrategy:
    """Caller's preferred provider if it is configured, else a fixed default."""

    def __init__(self, default: ProviderId = ProviderId.OPENAI):
        self.default = default

    def choose(self, request: GenerationRequest, registry: ProviderRegistry) -> ProviderId:
        return _usable_preference(request, registry) or self.default


class DailyRotationStrategy:
    """Preferred provider if configured, else a default that rotates by calendar day."""

    def __init__(self, rotation: Sequence[ProviderId] = PRIORITY, today: Callable[[], date] = date.today):
        self.rotation = tuple(rotation)
        self.today = today

    def choose(self, request: GenerationRequest, registry: ProviderRegistry) -> ProviderId:
        preferred = _usable_preference(request, registry)
        if preferred:
            return preferred
        return self.rotation[self.today().toordinal() % len(self.rotation)]


def _usable_preference(request: GenerationRequest, registry: ProviderRegistry) -> Optional[ProviderId]:
    preferred = request.preferred_provider
    if preferred and preferred != ProviderId.FALLBACK and registry.is_configured(preferred):
        return preferred
    return None


def build_strategy(name: Optional[str], default: ProviderId = ProviderId.OPENAI) -> SelectionStrategy:
    if (name or "priority").lower() == "daily":
        return DailyRotationStrategy()
    return PreferredProviderStrategy(default)
