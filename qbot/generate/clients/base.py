# Shared behaviour for provider clients: credential check, error mapping,
# and local recovery from empty payloads.

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ConfigurationMissing, EmptyContent, UpstreamError
from ..fallbacks import micro_answer
from ..types import ComposedPrompt, ConversationHandle, Message, ModelParams, ProfileRef, ProviderId

logger = logging.getLogger("qbot.clients")


class ProviderClient:
    provider_id: ProviderId
    supports_threads = False
    default_temperature = 0.7

    def __init__(self, api_key: Optional[str], model: str, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def create_thread(self) -> str:
        raise NotImplementedError(f"{self.provider_id.value} does not keep conversations")

    def generate(
        self,
        prompt: ComposedPrompt,
        profile: ProfileRef,
        params: ModelParams,
        handle: Optional[ConversationHandle] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        name = self.provider_id.value
        if not self.configured:
            raise ConfigurationMissing(name)

        logger.info("%s: request for %s (model=%s, max_tokens=%s)",
                    name, profile.identity_key or "anonymous", self.model, params.max_tokens)
        try:
            text, meta = self._complete(prompt, params, handle)
            if not text or not text.strip():
                raise EmptyContent(name)
        except EmptyContent as e:
            logger.warning("%s; using canned micro-answer", e)
            return micro_answer(), {"engine": name, "model": self.model, "tokens": None, "empty_content": True}
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(name, detail=f"{type(e).__name__}: {e}") from e
        return text.strip(), meta

    def _complete(
        self,
        prompt: ComposedPrompt,
        params: ModelParams,
        handle: Optional[ConversationHandle],
    ) -> Tuple[str, Dict[str, Any]]:
        raise NotImplementedError

    def _temperature(self, params: ModelParams) -> float:
        return float(params.temperature if params.temperature is not None else self.default_temperature)


def chat_messages(prompt: ComposedPrompt, include_system: bool = True) -> List[Dict[str, str]]:
    """OpenAI-style message list: system, prior turns, then the user turn."""
    msgs: List[Dict[str, str]] = []
    if include_system:
        msgs.append({"role": "system", "content": prompt.system})
    msgs.extend({"role": m.role, "content": m.content} for m in prompt.history if m.content)
    msgs.append({"role": "user", "content": prompt.user})
    return msgs
