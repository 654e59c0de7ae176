from datetime import date

import pytest

from qbot.generate.registry import FALLBACK_ORDER, PRIORITY, ProviderRegistry, attempt_order
from qbot.generate.selection import (
    DailyRotationStrategy,
    PreferredProviderStrategy,
    build_strategy,
)
from qbot.generate.types import GenerationRequest, ProviderId
from qbot.settings import Settings

REAL = [ProviderId.OPENAI, ProviderId.GEMINI, ProviderId.DEEPSEEK, ProviderId.MISTRAL]


@pytest.mark.parametrize("start", REAL)
def test_attempt_order_visits_each_provider_once(start):
    order = attempt_order(start)
    assert order[0] == start
    assert sorted(order) == sorted(REAL)
    assert order[1:] == list(FALLBACK_ORDER[start])


def test_provider_specific_rescue_orders():
    assert attempt_order(ProviderId.OPENAI) == [ProviderId.OPENAI, ProviderId.MISTRAL, ProviderId.GEMINI, ProviderId.DEEPSEEK]
    assert attempt_order(ProviderId.DEEPSEEK) == [ProviderId.DEEPSEEK, ProviderId.OPENAI, ProviderId.MISTRAL, ProviderId.GEMINI]


def test_registry_from_settings_marks_configured():
    settings = Settings(
        OPENAI_API_KEY="sk-test",
        GEMINI_API_KEY=None,
        DEEPSEEK_API_KEY=None,
        MISTRAL_API_KEY="m-test",
    )
    registry = ProviderRegistry.from_settings(settings)
    assert registry.available() == [ProviderId.OPENAI, ProviderId.MISTRAL]
    assert registry.is_configured(ProviderId.MISTRAL)
    assert not registry.is_configured(ProviderId.GEMINI)
    assert not registry.is_configured(None)
    assert registry.get(ProviderId.GEMINI) is not None


def test_preferred_provider_used_when_configured(make_client):
    registry = ProviderRegistry([make_client(ProviderId.OPENAI), make_client(ProviderId.GEMINI)])
    strategy = PreferredProviderStrategy(ProviderId.OPENAI)
    req = GenerationRequest(message="q", preferred_provider=ProviderId.GEMINI)
    assert strategy.choose(req, registry) == ProviderId.GEMINI


def test_unconfigured_preference_falls_back_to_default(make_client):
    registry = ProviderRegistry([make_client(ProviderId.OPENAI), make_client(ProviderId.GEMINI, configured=False)])
    strategy = PreferredProviderStrategy(ProviderId.OPENAI)
    for preferred in (ProviderId.GEMINI, ProviderId.FALLBACK, None):
        req = GenerationRequest(message="q", preferred_provider=preferred)
        assert strategy.choose(req, registry) == ProviderId.OPENAI


def test_daily_rotation(make_client):
    registry = ProviderRegistry([make_client(pid) for pid in REAL])
    day = date(2026, 10, 16)
    strategy = DailyRotationStrategy(today=lambda: day)
    expected = PRIORITY[day.toordinal() % len(PRIORITY)]
    assert strategy.choose(GenerationRequest(message="q"), registry) == expected

    req = GenerationRequest(message="q", preferred_provider=ProviderId.DEEPSEEK)
    assert strategy.choose(req, registry) == ProviderId.DEEPSEEK


def test_build_strategy():
    assert isinstance(build_strategy("daily"), DailyRotationStrategy)
    priority = build_strategy("priority", ProviderId.MISTRAL)
    assert isinstance(priority, PreferredProviderStrategy)
    assert priority.default == ProviderId.MISTRAL
    assert isinstance(build_strategy(None), PreferredProviderStrategy)
