"""
Response orchestrator.

Wires the pieces together for one incoming message:
    tier -> prompt -> provider (with fallback cascade) -> sanitize -> tier clip

The outward contract is that `generate` always returns a GenerationResult.
Provider failures move the cascade to the next provider; when every provider
has failed, a static canned tip is returned under ProviderId.FALLBACK.
"""

from __future__ import annotations
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .clients.base import ProviderClient
from .conversations import ConversationStore
from .errors import AllProvidersExhausted, ConfigurationMissing, InvalidRequest, UpstreamError
from .fallbacks import static_tip
from .prompts import RULES_PREFIX_CHARS, compose_prompt
from .registry import ProviderRegistry, attempt_order
from .sanitizer import sanitize
from .selection import PreferredProviderStrategy, SelectionStrategy, build_strategy
from .tiers import HttpPremiumOracle, TierPolicy, YamlTierLimits
from .types import (
    ComposedPrompt,
    GenerationRequest,
    GenerationResult,
    ModelParams,
    ProfileRef,
    ProviderId,
    Tier,
    TierLimits,
)

logger = logging.getLogger("qbot.orchestrator")


class ResponseOrchestrator:
    def __init__(
        self,
        registry: ProviderRegistry,
        tiers: TierPolicy,
        conversations: Optional[ConversationStore] = None,
        strategy: Optional[SelectionStrategy] = None,
        free_max_tokens: int = 200,
        premium_max_tokens: int = 600,
        rules_prefix_chars: int = RULES_PREFIX_CHARS,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.registry = registry
        self.tiers = tiers
        self.conversations = conversations
        self.strategy = strategy or PreferredProviderStrategy()
        self.free_max_tokens = free_max_tokens
        self.premium_max_tokens = premium_max_tokens
        self.rules_prefix_chars = rules_prefix_chars
        self.clock = clock

    @classmethod
    def from_settings(cls, settings, registry: Optional[ProviderRegistry] = None) -> "ResponseOrchestrator":
        oracle = None
        if settings.PREMIUM_ORACLE_URL:
            oracle = HttpPremiumOracle(settings.PREMIUM_ORACLE_URL, timeout=settings.PREMIUM_ORACLE_TIMEOUT_SECONDS)
        tiers = TierPolicy(
            allowlist=settings.UNRESTRICTED_IDENTITIES,
            oracle=oracle,
            limits_source=YamlTierLimits(
                settings.TIER_CONFIG_PATH,
                default=TierLimits(settings.DEFAULT_MIN_WORDS, settings.DEFAULT_MAX_WORDS),
            ),
            min_answer_fraction=settings.MIN_ANSWER_FRACTION,
        )
        return cls(
            registry=registry or ProviderRegistry.from_settings(settings),
            tiers=tiers,
            conversations=ConversationStore(),
            strategy=build_strategy(settings.SELECTION_STRATEGY, ProviderId(settings.DEFAULT_PROVIDER)),
            free_max_tokens=settings.FREE_MAX_TOKENS,
            premium_max_tokens=settings.PREMIUM_MAX_TOKENS,
            rules_prefix_chars=settings.RULES_PREFIX_CHARS,
        )

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Main entry point. Raises only InvalidRequest."""
        self._validate(request)

        tier = self.tiers.resolve(request.profile)
        limits = self.tiers.limits() if tier == Tier.RATE_LIMITED else None
        prompt = compose_prompt(request, limits, self.rules_prefix_chars)
        params = ModelParams(
            max_tokens=self.premium_max_tokens if tier == Tier.UNRESTRICTED else self.free_max_tokens,
        )
        start = self.strategy.choose(request, self.registry)
        logger.info("Using %s for %s (%s)", start.value.upper(), request.profile.identity_key or "anonymous", tier.value)

        try:
            return self._cascade(start, prompt, request.profile, params, tier, limits)
        except AllProvidersExhausted as e:
            logger.error("%s; answering with a static tip", e)
            return GenerationResult(
                content=static_tip(),
                provider_id=ProviderId.FALLBACK,
                tokens_used=None,
                latency_ms=0,
                tier=tier,
            )

    def clear_conversation(self, identity_key: Optional[str]) -> bool:
        """Forget the requester's provider thread so the next message starts fresh."""
        if not identity_key or self.conversations is None:
            return False
        return self.conversations.forget(identity_key)

    def _validate(self, request: GenerationRequest):
        if request is None:
            raise InvalidRequest("request is required")
        if not isinstance(request.message, str) or not request.message.strip():
            raise InvalidRequest("message is required")
        if not isinstance(request.category, str) or not request.category.strip():
            raise InvalidRequest("category is required")

    def _cascade(
        self,
        start: ProviderId,
        prompt: ComposedPrompt,
        profile: ProfileRef,
        params: ModelParams,
        tier: Tier,
        limits: Optional[TierLimits],
    ) -> GenerationResult:
        tried = []
        for pid in attempt_order(start):
            client = self.registry.get(pid)
            if client is None or not client.configured:
                logger.debug("Skipping %s: not configured", pid.value)
                continue
            if tried:
                logger.info("Trying fallback to %s after %s failed", pid.value, tried[-1])
            tried.append(pid.value)

            started = self.clock()
            try:
                text, meta = self._call(client, prompt, profile, params)
            except (ConfigurationMissing, UpstreamError) as e:
                logger.warning("%s generation failed: %s", pid.value, e)
                continue
            latency_ms = int((self.clock() - started) * 1000)

            content = self.tiers.apply(sanitize(text), tier, limits)
            return GenerationResult(
                content=content,
                provider_id=pid,
                tokens_used=meta.get("tokens"),
                latency_ms=latency_ms,
                tier=tier,
            )
        raise AllProvidersExhausted(tried)

    def _call(
        self,
        client: ProviderClient,
        prompt: ComposedPrompt,
        profile: ProfileRef,
        params: ModelParams,
    ) -> Tuple[str, Dict[str, Any]]:
        key = profile.identity_key
        if client.supports_threads and key and self.conversations is not None:
            return self.conversations.call_with_handle(
                key,
                client.create_thread,
                lambda handle: client.generate(prompt, profile, params, handle),
            )
        return client.generate(prompt, profile, params)
