"""
Together.ai chat completion client, blocking and streaming
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Dict, Tuple

import httpx
from fastapi import HTTPException

from fitfuel.config import (LLM_MAX_RETRIES, LLM_RETRY_DELAY, LLM_TIMEOUT,
                            STREAM_MAX_TOKENS, TOGETHER_AI_API_KEY,
                            TOGETHER_AI_API_URL, TOGETHER_AI_MODEL)
from fitfuel.errors import UpstreamError

logger = logging.getLogger(__name__)

STREAM_DATA_PREFIX = "data:"
STREAM_DONE = "[DONE]"


def require_api_key() -> None:
    if not TOGETHER_AI_API_KEY:
        raise HTTPException(status_code=500, detail="Together.ai API key is not configured")


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {TOGETHER_AI_API_KEY}",
        "Content-Type": "application/json"
    }


def _payload(prompt: str, system_prompt: str, max_tokens: int, temperature: float, stream: bool) -> Dict:
    return {
        "model": TOGETHER_AI_MODEL,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt}
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
        "stream": stream,
    }


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message", response.text[:200])
    except (ValueError, AttributeError):
        return response.text[:200]


async def call_together_ai(prompt: str, system_prompt: str = "You are a helpful assistant.",
                           max_tokens: int = STREAM_MAX_TOKENS, temperature: float = 0.7) -> str:
    """Call Together.ai API with retry logic"""
    require_api_key()
    payload = _payload(prompt, system_prompt, max_tokens, temperature, stream=False)

    for attempt in range(LLM_MAX_RETRIES + 1):
        retries_left = attempt < LLM_MAX_RETRIES
        try:
            logger.debug("Calling Together.ai (attempt %d/%d) with model %s, max_tokens %d",
                         attempt + 1, LLM_MAX_RETRIES + 1, TOGETHER_AI_MODEL, max_tokens)
            async with httpx.AsyncClient(timeout=LLM_TIMEOUT) as client:
                response = await client.post(TOGETHER_AI_API_URL, headers=_headers(), json=payload)
        except httpx.ConnectError as e:
            logger.warning("Connection error to Together.ai (attempt %d): %s", attempt + 1, e)
            if retries_left:
                await asyncio.sleep(LLM_RETRY_DELAY)
                continue
            raise HTTPException(
                status_code=503,
                detail=f"Connection error: Cannot reach Together.ai API after {LLM_MAX_RETRIES + 1} attempts. {str(e)[:200]}"
            )
        except httpx.TimeoutException as e:
            logger.warning("Timeout calling Together.ai (attempt %d): %s", attempt + 1, e)
            if retries_left:
                await asyncio.sleep(LLM_RETRY_DELAY)
                continue
            raise HTTPException(
                status_code=504,
                detail="Request to Together.ai API timed out. The service may be slow or unavailable. Please try again."
            )

        if response.status_code != 200:
            error_msg = _error_message(response)
            logger.warning("Together.ai error response (status %d): %s", response.status_code, error_msg)
            # Server errors are retried
            if response.status_code == 500 and retries_left:
                await asyncio.sleep(LLM_RETRY_DELAY)
                continue
            if response.status_code == 500:
                raise HTTPException(
                    status_code=503,
                    detail=f"Together.ai service is temporarily unavailable (server error). Please try again in a few moments. Error: {error_msg}"
                )
            raise HTTPException(
                status_code=500,
                detail=f"Together.ai API error (status {response.status_code}): {error_msg}"
            )

        try:
            result = response.json()
            content = result["choices"][0]["message"].get("content")
        except (ValueError, KeyError, IndexError) as e:
            logger.error("Unexpected Together.ai response: %s", response.text[:500])
            raise HTTPException(
                status_code=500,
                detail=f"Unexpected response format from Together.ai API: {str(e)}"
            )

        if not content or not str(content).strip():
            raise HTTPException(status_code=500, detail="Empty response from LLM. Please try again.")
        logger.debug("Received response from LLM (%d chars)", len(content))
        return str(content)

    # Only reached if every attempt hit a retried server error
    raise HTTPException(
        status_code=503,
        detail="Together.ai service is temporarily unavailable after multiple retry attempts. Please try again in a few moments."
    )


def parse_stream_line(line: str) -> Tuple[bool, str]:
    """
    Read one line of the provider's event stream.

    Returns (done, content). Comment lines, keep-alives and chunks without
    text give (False, ""); so does a malformed chunk, after logging it.
    """
    line = line.strip()
    if not line.startswith(STREAM_DATA_PREFIX):
        return False, ""

    data = line[len(STREAM_DATA_PREFIX):].strip()
    if data == STREAM_DONE:
        return True, ""

    try:
        chunk = json.loads(data)
        choices = chunk.get("choices") or [{}]
        content = (choices[0].get("delta") or {}).get("content") or ""
        if not isinstance(content, str):
            raise TypeError(f"content is {type(content).__name__}")
        return False, content
    except (ValueError, AttributeError, KeyError, IndexError, TypeError) as e:
        logger.debug("Skipping unparseable stream line %r: %s", data[:100], e)
        return False, ""


async def stream_together_ai(prompt: str, system_prompt: str,
                             max_tokens: int = STREAM_MAX_TOKENS, temperature: float = 0.8) -> AsyncIterator[str]:
    """Yield content fragments as Together.ai generates them. Not retried."""
    require_api_key()
    payload = _payload(prompt, system_prompt, max_tokens, temperature, stream=True)

    logger.info("Starting Together.ai stream with model %s, max_tokens %d", TOGETHER_AI_MODEL, max_tokens)
    try:
        async with httpx.AsyncClient(timeout=LLM_TIMEOUT) as client:
            async with client.stream("POST", TOGETHER_AI_API_URL, headers=_headers(), json=payload) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise UpstreamError(
                        f"Together.ai API error (status {response.status_code}): {_error_message(response)}"
                    )
                async for line in response.aiter_lines():
                    done, content = parse_stream_line(line)
                    if done:
                        break
                    if content:
                        yield content
    except httpx.HTTPError as e:
        raise UpstreamError(f"Together.ai stream failed: {type(e).__name__}: {e}") from e
