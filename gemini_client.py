import asyncio
import logging
import sys
from typing import Any, Optional

import httpx

from config import ConfigurationError, Settings, load_settings

logger = logging.getLogger(__name__)


class GeminiProxyError(RuntimeError):
    pass


class InvalidPromptError(ValueError):
    pass


class UpstreamExhaustedError(GeminiProxyError):
    def __init__(self, attempts: int, status_code: int | None = None):
        super().__init__(f"Gemini API failed after {attempts} attempts")
        self.attempts = attempts
        self.status_code = status_code


class MalformedUpstreamResponseError(GeminiProxyError):
    def __init__(self, result: Any):
        super().__init__("Unexpected response structure")
        self.result = result


def build_payload(prompt: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": prompt}]}]}


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after the zero-based ``attempt`` fails: 1, 2, 4, ..."""
    return float(2**attempt)


def extract_text(result: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` or raise MalformedUpstreamResponseError."""
    try:
        text = result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedUpstreamResponseError(result) from exc
    if not isinstance(text, str) or not text:
        raise MalformedUpstreamResponseError(result)
    return text


async def _backoff(delay: float) -> None:
    await asyncio.sleep(delay)


async def ask_gemini(prompt: str | None, *, settings: Settings, client: httpx.AsyncClient) -> str:
    cleaned = prompt.strip() if isinstance(prompt, str) else ""
    if not cleaned:
        raise InvalidPromptError("Prompt is required.")

    payload = build_payload(prompt)
    max_retries = settings.max_retries
    logger.info("Calling Gemini model=%s prompt_len=%d max_retries=%d", settings.model_name, len(prompt), max_retries)
    logger.debug("Prompt preview: %s", prompt[:1000])

    # Transport errors raised by client.post are not retried; they propagate to the caller.
    response: httpx.Response | None = None
    for attempt in range(max_retries):
        response = await client.post(
            settings.api_url,
            params={"key": settings.gemini_api_key},
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        if response.is_success:
            break

        logger.warning(
            "Gemini attempt %d/%d returned status=%d body=%s",
            attempt + 1,
            max_retries,
            response.status_code,
            response.text[:500],
        )
        if attempt < max_retries - 1:
            delay = backoff_delay(attempt)
            logger.info("Retrying Gemini API in %.0fs...", delay)
            await _backoff(delay)
    else:
        status_code = response.status_code if response is not None else None
        logger.error("Gemini API failed after %d attempts last_status=%s", max_retries, status_code)
        raise UpstreamExhaustedError(max_retries, status_code)

    result = response.json()
    try:
        text = extract_text(result)
    except MalformedUpstreamResponseError:
        logger.error("Unexpected Gemini API structure: %s", result)
        raise

    logger.info("Gemini response received model=%s resp_len=%d", settings.model_name, len(text))
    logger.debug("Response preview: %s", text[:1000])
    return text


async def _ask_once(prompt: str, settings: Settings) -> str:
    async with httpx.AsyncClient(timeout=settings.timeout_seconds) as client:
        return await ask_gemini(prompt, settings=settings, client=client)


def main(argv: Optional[list[str]] = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    prompt = " ".join(args).strip()
    if not prompt:
        print("Usage: python gemini_client.py <prompt>")
        return 1

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Startup error: {exc}")
        return 1

    try:
        text = asyncio.run(_ask_once(prompt, settings))
    except Exception as exc:
        print(f"Error: {exc}")
        return 1

    print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
