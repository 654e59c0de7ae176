# Orchestration package

# Makes generate/ importable and exposes key interfaces.

from .orchestrator import ResponseOrchestrator
from .registry import ProviderRegistry
from .sanitizer import sanitize
from .tiers import TierPolicy
from .types import (
    GenerationRequest,
    GenerationResult,
    Language,
    Message,
    ProfileRef,
    ProviderId,
    Tier,
    TierLimits,
)

__all__ = [
    "ResponseOrchestrator",
    "ProviderRegistry",
    "TierPolicy",
    "sanitize",
    "GenerationRequest",
    "GenerationResult",
    "Language",
    "Message",
    "ProfileRef",
    "ProviderId",
    "Tier",
    "TierLimits",
]
