# Client for the OpenAI Responses API.
# Keeps one server-side conversation per requester when a handle is given;
# otherwise sends the history inline like the other providers.

from typing import Any, Dict, Optional, Tuple

import openai
from openai import OpenAI

from ..errors import ConversationNotFound, UpstreamError
from ..types import ComposedPrompt, ConversationHandle, ModelParams, ProviderId
from .base import ProviderClient, chat_messages


class OpenAIClient(ProviderClient):
    provider_id = ProviderId.OPENAI
    supports_threads = True

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o", timeout: float = 30.0, client=None):
        super().__init__(api_key, model, timeout)
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def create_thread(self) -> str:
        try:
            conv = self.client.conversations.create(metadata={"source": "qbot"})
        except Exception as e:
            raise UpstreamError(self.provider_id.value, detail=f"conversation create: {e}") from e
        return conv.id

    def _complete(
        self,
        prompt: ComposedPrompt,
        params: ModelParams,
        handle: Optional[ConversationHandle],
    ) -> Tuple[str, Dict[str, Any]]:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "instructions": prompt.system,
            "temperature": self._temperature(params),
            "max_output_tokens": int(params.max_tokens or 200),
        }
        if handle is not None:
            kwargs["conversation"] = handle.provider_thread_id
            kwargs["input"] = prompt.user
        else:
            kwargs["input"] = chat_messages(prompt, include_system=False)

        try:
            resp = self.client.responses.create(**kwargs)
        except openai.NotFoundError as e:
            if handle is not None:
                raise ConversationNotFound(self.provider_id.value, detail=str(e), status_code=404) from e
            raise UpstreamError(self.provider_id.value, detail=str(e), status_code=404) from e
        except openai.APIStatusError as e:
            raise UpstreamError(self.provider_id.value, detail=str(e), status_code=e.status_code) from e
        except openai.APIError as e:
            raise UpstreamError(self.provider_id.value, detail=str(e)) from e

        usage = getattr(resp, "usage", None)
        meta = {
            "engine": "openai",
            "model": self.model,
            "tokens": getattr(usage, "total_tokens", None),
        }
        if handle is not None:
            meta["conversation"] = handle.provider_thread_id
        return (resp.output_text or ""), meta
