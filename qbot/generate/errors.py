"""
Error taxonomy for the orchestration layer.

Only ConfigurationMissing and UpstreamError drive the provider fallback
cascade; the rest are absorbed where they are detected.
"""

from typing import Optional, Sequence


class OrchestrationError(Exception):
    """Base exception for orchestration errors"""
    pass


class InvalidRequest(OrchestrationError, ValueError):
    """Inbound request is missing required fields"""
    pass


class ConfigurationMissing(OrchestrationError):
    """No credential available for a provider"""

    def __init__(self, provider: str):
        super().__init__(f"{provider} is not configured")
        self.provider = provider


class UpstreamError(OrchestrationError):
    """Non-success response, timeout or unreadable payload from a provider"""

    def __init__(self, provider: str, detail: str = "", status_code: Optional[int] = None):
        label = f"{provider} request failed"
        if status_code:
            label += f" ({status_code})"
        if detail:
            label += f": {detail}"
        super().__init__(label)
        self.provider = provider
        self.status_code = status_code


class ConversationNotFound(UpstreamError):
    """Provider rejected a stored conversation handle"""
    pass


class EmptyContent(OrchestrationError):
    """Call succeeded but returned no usable text"""

    def __init__(self, provider: str, reason: str = ""):
        super().__init__(f"{provider} returned empty content{': ' + reason if reason else ''}")
        self.provider = provider
        self.reason = reason


class TierResolutionError(OrchestrationError):
    """Premium-status oracle could not answer"""
    pass


class AllProvidersExhausted(OrchestrationError):
    """Every configured provider failed for one request"""

    def __init__(self, tried: Sequence[str]):
        super().__init__(f"all providers failed: {', '.join(tried) or 'none configured'}")
        self.tried = list(tried)
