# Client for the Gemini generateContent REST endpoint.
# Stateless; empty candidates and safety blocks surface as EmptyContent.

from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import EmptyContent, UpstreamError
from ..types import ComposedPrompt, ConversationHandle, ModelParams, ProviderId
from .base import ProviderClient

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


class GeminiClient(ProviderClient):
    provider_id = ProviderId.GEMINI

    def __init__(self, api_key: Optional[str], model: str = "gemini-1.5-flash",
                 base_url: str = GEMINI_BASE_URL, timeout: float = 30.0):
        super().__init__(api_key, model, timeout)
        self.base_url = base_url.rstrip("/")

    def _complete(
        self,
        prompt: ComposedPrompt,
        params: ModelParams,
        handle: Optional[ConversationHandle],
    ) -> Tuple[str, Dict[str, Any]]:
        payload = {
            "systemInstruction": {"parts": [{"text": prompt.system}]},
            "contents": self._contents(prompt),
            "generationConfig": {
                "temperature": self._temperature(params),
                "topK": 1,
                "topP": 1,
                "maxOutputTokens": int(params.max_tokens or 200),
            },
            "safetySettings": SAFETY_SETTINGS,
        }
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        try:
            resp = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise UpstreamError(self.provider_id.value, detail=str(e), status_code=status) from e
        except (requests.RequestException, ValueError) as e:
            raise UpstreamError(self.provider_id.value, detail=str(e)) from e

        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            raise EmptyContent(self.provider_id.value, reason)
        first = candidates[0]
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts)
        if not text.strip():
            raise EmptyContent(self.provider_id.value, first.get("finishReason", ""))

        usage = data.get("usageMetadata") or {}
        meta = {"engine": "gemini", "model": self.model, "tokens": usage.get("totalTokenCount")}
        return text, meta

    def _contents(self, prompt: ComposedPrompt) -> List[Dict[str, Any]]:
        contents = []
        for m in prompt.history:
            if not m.content:
                continue
            role = "model" if m.role == "assistant" else "user"
            contents.append({"role": role, "parts": [{"text": m.content}]})
        contents.append({"role": "user", "parts": [{"text": prompt.user}]})
        return contents
