from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Optional

from google import genai
from google.genai import types

from tldr_ai.core.errors import ProviderError, ResponseShapeError

logger = logging.getLogger(__name__)


def _safe_json_loads(text: str) -> Any:
    """
    Strict parse → extract {...} → parse.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Extract first JSON object (code fences, stray prose)
    m = re.search(r"\{.*\}", text, re.DOTALL)
    if not m:
        raise ResponseShapeError(
            f"Model returned no JSON object. First 200 chars: {text[:200]!r}"
        )

    try:
        return json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ResponseShapeError(f"Model returned invalid JSON: {e}") from e


@dataclass
class LLMConfig:
    provider: str
    model: str
    temperature: float = 0.2
    max_tokens: Optional[int] = None
    timeout_s: float = 60.0
    gemini_api_key: Optional[str] = None


class GeminiLLM:
    """One ``generate_content`` round trip per call: no retries, no streaming.

    The SDK client is created on first use, so a missing key surfaces as a
    ``ProviderError`` on the call that needed it, like any auth failure.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
        timeout_s: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ProviderError(
                    "GEMINI_API_KEY is missing. Set GEMINI_API_KEY or GOOGLE_AI_API_KEY"
                )
            self._client = genai.Client(
                api_key=self.api_key,
                # HttpOptions.timeout is in milliseconds
                http_options=types.HttpOptions(timeout=int(self.timeout_s * 1000)),
            )
        return self._client

    def _config(self, **kwargs: Any) -> types.GenerateContentConfig:
        if self.max_tokens is not None:
            kwargs["max_output_tokens"] = self.max_tokens
        return types.GenerateContentConfig(temperature=self.temperature, **kwargs)

    def _generate(self, contents: str, config: types.GenerateContentConfig):
        client = self._get_client()
        logger.info("Calling Gemini  model=%s  prompt=%s chars", self.model, f"{len(contents):,}")
        t0 = time.monotonic()
        try:
            resp = client.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            # APIError (auth, quota, 5xx) and httpx transport/timeouts alike
            raise ProviderError(str(e) or type(e).__name__) from e
        logger.info("Gemini responded in %.1fs", time.monotonic() - t0)
        return resp

    def generate_json(self, system: str, user: str, schema: types.Schema) -> Any:
        resp = self._generate(
            user,
            self._config(
                system_instruction=system,
                response_mime_type="application/json",
                response_schema=schema,
            ),
        )

        txt = resp.text
        if not txt:
            raise ResponseShapeError("Empty response from Gemini model")
        return _safe_json_loads(txt)

    def generate_text(self, prompt: str, system: Optional[str] = None) -> str:
        config = self._config(system_instruction=system) if system else self._config()
        resp = self._generate(prompt, config)
        return resp.text or ""


def build_llm(cfg: LLMConfig) -> GeminiLLM:
    provider = (cfg.provider or "").lower().strip()

    if provider == "gemini":
        return GeminiLLM(
            api_key=cfg.gemini_api_key,
            model=cfg.model,
            temperature=cfg.temperature,
            max_tokens=cfg.max_tokens,
            timeout_s=cfg.timeout_s,
        )

    raise ValueError(f"Unsupported llm provider: {cfg.provider}. Use provider: gemini")
