# ============================================================
# Tier policy engine
# ------------------------------------------------------------
# Resolves a requester to unrestricted / rate-limited and clips
# rate-limited answers to a word budget without ever cutting
# into the follow-up block.
# ============================================================

from __future__ import annotations
import logging
import math
import os
import re
from typing import Iterable, Optional, Protocol

import requests
import yaml

from .errors import TierResolutionError
from .sanitizer import locate_followup, rewrite_block
from .types import ProfileRef, Tier, TierLimits

logger = logging.getLogger("qbot.tiers")

DEFAULT_LIMITS = TierLimits(min_words=97, max_words=97)
_WORD = re.compile(r"\S+")


class PremiumOracle(Protocol):
    def is_premium(self, identity_key: str) -> Optional[bool]:
        ...


class HttpPremiumOracle:
    """Best-effort premium lookup against the billing service."""

    def __init__(self, base_url: str, timeout: float = 5.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def is_premium(self, identity_key: str) -> Optional[bool]:
        url = f"{self.base_url}/{identity_key}"
        try:
            resp = requests.get(url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise TierResolutionError(f"premium lookup failed for {identity_key}: {e}") from e
        value = data.get("isPremium") if isinstance(data, dict) else None
        if value is None:
            return None
        return bool(value)


class YamlTierLimits:
    """Reads free-tier word limits from a YAML file on every call."""

    def __init__(self, path: str, default: TierLimits = DEFAULT_LIMITS):
        self.path = path
        self.default = default

    def load(self) -> TierLimits:
        if not os.path.exists(self.path):
            return self.default
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                cfg = yaml.safe_load(f) or {}
            if not isinstance(cfg, dict):
                raise TypeError(f"expected a mapping, got {type(cfg).__name__}")
            return TierLimits(
                min_words=int(cfg.get("free_user_min_words", self.default.min_words)),
                max_words=int(cfg.get("free_user_max_words", self.default.max_words)),
            )
        except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
            logger.warning("Invalid tier limits in %s (%s); using %s-%s words",
                           self.path, e, self.default.min_words, self.default.max_words)
            return self.default


def count_words(text: str) -> int:
    return len(_WORD.findall(text))


def clip_words(text: str, max_words: int) -> str:
    """Cut `text` after `max_words` words and close it with clean punctuation."""
    if max_words <= 0:
        return ""
    words = list(_WORD.finditer(text))
    if len(words) <= max_words:
        return text.rstrip()
    clipped = text[:words[max_words - 1].end()]
    clipped = re.sub(r"[\s,;:\-–—•*(\[]+$", "", clipped)
    if not clipped:
        return ""
    if clipped[-1] not in ".!?":
        clipped += "."
    return clipped


class TierPolicy:
    def __init__(
        self,
        allowlist: Iterable[str] = (),
        oracle: Optional[PremiumOracle] = None,
        limits_source: Optional[YamlTierLimits] = None,
        min_answer_fraction: float = 0.25,
    ):
        self.allowlist = frozenset(str(k) for k in allowlist)
        self.oracle = oracle
        self.limits_source = limits_source
        self.min_answer_fraction = min_answer_fraction

    def resolve(self, profile: Optional[ProfileRef]) -> Tier:
        if profile is None:
            return Tier.RATE_LIMITED
        if profile.is_admin:
            logger.info("Admin requester %s - unrestricted", profile.identity_key)
            return Tier.UNRESTRICTED

        key = profile.identity_key
        if not key:
            logger.info("No identity on requester; treating as rate-limited")
            return Tier.RATE_LIMITED
        if key in self.allowlist:
            logger.info("Allowlisted requester %s - unrestricted", key)
            return Tier.UNRESTRICTED
        if profile.is_premium:
            return Tier.UNRESTRICTED

        if self.oracle is not None:
            try:
                premium = self.oracle.is_premium(key)
            except Exception as e:
                err = e if isinstance(e, TierResolutionError) else TierResolutionError(
                    f"premium oracle error for {key}: {type(e).__name__}: {e}")
                logger.warning("%s; treating %s as rate-limited", err, key)
                return Tier.RATE_LIMITED
            if premium:
                logger.info("Premium confirmed for %s", key)
                return Tier.UNRESTRICTED
        return Tier.RATE_LIMITED

    def limits(self) -> TierLimits:
        if self.limits_source is None:
            return DEFAULT_LIMITS
        return self.limits_source.load()

    def apply(self, content: str, tier: Tier, limits: Optional[TierLimits] = None) -> str:
        if tier == Tier.UNRESTRICTED:
            return content
        limits = limits or self.limits()
        budget = limits.max_words
        if count_words(content) <= budget:
            return content

        start = locate_followup(content)
        if start is None or rewrite_block(content[start:]) is None:
            return clip_words(content, budget)

        answer, block = content[:start], content[start:]
        floor = max(1, math.floor(budget * self.min_answer_fraction))
        answer_budget = max(budget - count_words(block), floor)
        if count_words(answer) <= answer_budget:
            return content
        logger.debug("Clipping answer to %s words, keeping %s-word follow-up", answer_budget, count_words(block))
        return f"{clip_words(answer, answer_budget)}\n{block}"
