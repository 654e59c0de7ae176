# Chat Completions client for OpenAI-compatible backends (DeepSeek, Mistral).
# Same interface as OpenAIClient, stateless per call.

from typing import Any, Dict, Optional, Tuple

import openai
from openai import OpenAI

from ..errors import UpstreamError
from ..types import ComposedPrompt, ConversationHandle, ModelParams, ProviderId
from .base import ProviderClient, chat_messages


class OpenAICompatibleClient(ProviderClient):
    def __init__(
        self,
        provider_id: ProviderId,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float = 30.0,
        temperature: float = 0.7,
        client=None,
    ):
        super().__init__(api_key, model, timeout)
        self.provider_id = provider_id
        self.base_url = base_url
        self.default_temperature = temperature
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)

    def _complete(
        self,
        prompt: ComposedPrompt,
        params: ModelParams,
        handle: Optional[ConversationHandle],
    ) -> Tuple[str, Dict[str, Any]]:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=chat_messages(prompt),
                temperature=self._temperature(params),
                max_tokens=int(params.max_tokens or 200),
            )
        except openai.APIStatusError as e:
            raise UpstreamError(self.provider_id.value, detail=str(e), status_code=e.status_code) from e
        except openai.APIError as e:
            raise UpstreamError(self.provider_id.value, detail=str(e)) from e

        text = resp.choices[0].message.content if resp.choices else None
        usage = getattr(resp, "usage", None)
        meta = {
            "engine": self.provider_id.value,
            "model": self.model,
            "tokens": getattr(usage, "total_tokens", None),
        }
        return (text or ""), meta


def deepseek_client(api_key: Optional[str], model: str, base_url: str, timeout: float = 30.0) -> OpenAICompatibleClient:
    return OpenAICompatibleClient(ProviderId.DEEPSEEK, api_key, model, base_url, timeout, temperature=0.2)


def mistral_client(api_key: Optional[str], model: str, base_url: str, timeout: float = 30.0) -> OpenAICompatibleClient:
    return OpenAICompatibleClient(ProviderId.MISTRAL, api_key, model, base_url, timeout, temperature=0.7)
