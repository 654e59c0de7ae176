# Typed dataclasses shared across the orchestration modules.

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple


class ProviderId(str, Enum):
    OPENAI = "openai"        # primary, supports durable conversations
    GEMINI = "gemini"        # secondary
    DEEPSEEK = "deepseek"    # tertiary
    MISTRAL = "mistral"      # quaternary
    FALLBACK = "fallback"    # static canned answer, never a real backend


class Language(str, Enum):
    DEFAULT = "en"
    ALTERNATE = "tr"


class Tier(str, Enum):
    UNRESTRICTED = "unrestricted"
    RATE_LIMITED = "rate_limited"


@dataclass
class Message:
    """Single chat turn: system, user, or assistant."""
    role: str
    content: str


@dataclass
class ModelParams:
    """LLM parameters per request."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass(frozen=True)
class ProfileRef:
    """Read-only view of the requester, owned by the user-profile service."""
    identity_key: Optional[str] = None
    rank: Optional[str] = None
    vessel: Optional[str] = None
    is_premium: bool = False
    is_admin: bool = False


@dataclass(frozen=True)
class GenerationRequest:
    message: str
    category: str = "Maritime Technical Support"
    language: Language = Language.DEFAULT
    profile: ProfileRef = field(default_factory=ProfileRef)
    active_rules: Optional[str] = None
    history: Tuple[Message, ...] = ()
    preferred_provider: Optional[ProviderId] = None


@dataclass
class ComposedPrompt:
    """Provider-agnostic instruction payload."""
    system: str
    user: str
    history: List[Message] = field(default_factory=list)


@dataclass
class GenerationResult:
    """The only artifact handed back to callers."""
    content: str
    provider_id: ProviderId
    tokens_used: Optional[int] = None
    latency_ms: int = 0
    tier: Optional[Tier] = None


@dataclass
class ConversationHandle:
    requester_key: str
    provider_thread_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class TierLimits:
    min_words: int
    max_words: int

    def __post_init__(self):
        if self.min_words <= 0 or self.max_words <= 0:
            raise ValueError("tier word limits must be positive")
        if self.min_words > self.max_words:
            raise ValueError(f"min_words ({self.min_words}) > max_words ({self.max_words})")
