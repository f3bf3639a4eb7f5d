from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Protocol

logger = logging.getLogger(__name__)

REPAIR_PROMPT = (
    "The previous response was invalid JSON. "
    "Return ONLY valid JSON that fixes it without adding new facts.\n"
    "Original response:\n{raw}"
)


class LLMClient(Protocol):
    async def chat(self, prompt: str, *, max_retries: int = 3) -> str: ...

    async def chat_json(self, prompt: str, *, max_retries: int = 3) -> Dict[str, Any]: ...


class _JSONChatMixin:
    async def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        raise NotImplementedError

    async def chat_json(self, prompt: str, *, max_retries: int = 3) -> Dict[str, Any]:
        raw = await self.chat(prompt, max_retries=max_retries)
        parsed = _safe_json_parse(raw)
        if parsed is not None:
            return parsed

        # Ask model to repair the JSON if parsing failed.
        logger.info("Model returned invalid JSON; requesting a repair")
        repaired_raw = await self.chat(REPAIR_PROMPT.format(raw=raw), max_retries=max_retries)
        repaired = _safe_json_parse(repaired_raw)
        if repaired is None:
            raise ValueError("Model did not return valid JSON after repair attempt")
        return repaired


class OpenAIClient(_JSONChatMixin):
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        if not api_key:
            raise ValueError("OpenAI API key required.")
        try:
            import openai  # type: ignore
        except Exception as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "openai package is required. Install with `pip install openai`."
            ) from exc

        self.client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model

    async def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        messages = [{"role": "user", "content": prompt}]
        delay = 1.0
        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                resp = await self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=0.2,
                    response_format={"type": "json_object"},
                )
                return resp.choices[0].message.content or ""
            except Exception as exc:  # pragma: no cover - network call
                last_error = exc
                if _is_rate_limit_error(exc):
                    wait_time = 60.0
                    logger.warning(
                        "OpenAI rate limit encountered (attempt %s). Waiting %.1fs",
                        attempt + 1,
                        wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.warning(
                        "OpenAI call failed (attempt %s): %s", attempt + 1, exc
                    )
                    await asyncio.sleep(delay)
                delay *= 2
        raise RuntimeError(f"OpenAI call failed after retries: {last_error}")  # pragma: no cover - network call


class HuggingFaceClient(_JSONChatMixin):
    def __init__(self, api_token: str, model: str):
        if not api_token:
            raise ValueError("Hugging Face token required.")
        try:
            from huggingface_hub import AsyncInferenceClient  # type: ignore
        except Exception as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "huggingface_hub package is required. Install with `pip install huggingface_hub`."
            ) from exc

        self.client = AsyncInferenceClient(model=model, token=api_token)
        self.model = model

    async def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        delay = 1.0
        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                return await self.client.text_generation(
                    prompt,
                    max_new_tokens=1024,
                    temperature=0.2,
                    do_sample=False,
                    return_full_text=False,
                )
            except Exception as exc:  # pragma: no cover - network call
                last_error = exc
                if _is_rate_limit_error(exc):
                    wait_time = 30.0
                    logger.warning(
                        "Hugging Face rate limit encountered (attempt %s). Waiting %.1fs",
                        attempt + 1,
                        wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.warning(
                        "Hugging Face call failed (attempt %s): %s", attempt + 1, exc
                    )
                    await asyncio.sleep(delay)
                delay *= 2
        raise RuntimeError(
            f"Hugging Face call failed after retries: {last_error}"
        )  # pragma: no cover - network call


def build_client(provider: str, api_key: str, model: str) -> LLMClient:
    normalized = provider.strip().lower()
    if normalized in {"openai", "open ai"}:
        return OpenAIClient(api_key=api_key, model=model)
    if normalized in {"huggingface", "hugging face", "hugging face (inference api)"}:
        return HuggingFaceClient(api_token=api_key, model=model)
    raise ValueError(f"Unknown provider: {provider}")


def _safe_json_parse(text: str) -> Dict[str, Any] | None:
    # Attempt direct parse
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # Try to extract JSON object if wrapped in text or code fences.
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        snippet = text[start : end + 1]
        try:
            parsed = json.loads(snippet)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def _is_rate_limit_error(exc: Exception) -> bool:
    msg = str(exc).lower()
    if "rate limit" in msg or "rate_limit" in msg:
        return True
    if getattr(exc, "status_code", None) == 429:
        return True
    return False
