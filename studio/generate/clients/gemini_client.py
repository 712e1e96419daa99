# Client for the Gemini generateContent REST endpoint.
# Same interface as EchoDevClient: generate(prompt, params) -> (text, meta).

from typing import Any, Dict, Optional, Tuple

import requests

from ..errors import ProviderError, ProviderTimeout
from ..types import ModelParams

PROVIDER = "gemini"


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise ValueError("GeminiClient requires an API key (GEMINI_API_KEY)")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def set_model(self, model: str):
        self.model = model

    def _url(self) -> str:
        # accept "models/gemini-2.0-flash" as well as the bare name
        model = self.model.split("/", 1)[1] if self.model.startswith("models/") else self.model
        return f"{self.base_url}/models/{model}:generateContent"

    def generate(self, prompt: str, params: ModelParams) -> Tuple[str, Dict[str, Any]]:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": float(params.temperature if params.temperature is not None else 0.7),
                "maxOutputTokens": int(params.max_tokens or 2048),
            },
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        try:
            resp = self.session.post(self._url(), json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise ProviderTimeout(f"Gemini request timed out after {self.timeout}s", PROVIDER) from e
        except requests.ConnectionError as e:
            raise ProviderError(f"Gemini connection error: {e}", PROVIDER, is_retryable=True) from e

        if resp.status_code >= 300:
            raise ProviderError(
                f"Gemini API error {resp.status_code}: {resp.text[:400]}",
                PROVIDER,
                status_code=resp.status_code,
                retry_after=_retry_after(resp),
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(f"Gemini returned non-JSON body: {resp.text[:400]}", PROVIDER) from e

        text = _candidate_text(data)
        if text is None:
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            detail = f"blocked ({reason})" if reason else "no candidates with text"
            raise ProviderError(f"Gemini response unusable: {detail}", PROVIDER, is_retryable=False)

        candidate = (data.get("candidates") or [{}])[0]
        meta = {
            "engine": PROVIDER,
            "model": self.model,
            "finish_reason": candidate.get("finishReason"),
            "usage": data.get("usageMetadata") or {},
        }
        return text, meta


def _candidate_text(data: Dict[str, Any]) -> Optional[str]:
    candidates = data.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        return None
    return "".join(texts)


def _retry_after(resp: requests.Response) -> Optional[float]:
    value = resp.headers.get("Retry-After")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
