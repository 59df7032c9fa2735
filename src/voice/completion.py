"""Async access to blocking upstream clients: timeouts, retries, JSON extraction."""

import asyncio
import json
from typing import Any, Callable

import structlog

from llm.base import LLMProvider

logger = structlog.get_logger()

_decoder = json.JSONDecoder()


async def run_blocking(
    fn: Callable[..., Any],
    *args,
    timeout: float | None = None,
    retrying: Callable | None = None,
    **kwargs,
) -> Any:
    """Run a blocking call in a worker thread, bounded by timeout.

    A timed-out call keeps running in its thread; its late result is dropped.
    """
    call = retrying(fn) if retrying else fn
    coro = asyncio.to_thread(call, *args, **kwargs)
    if timeout is None:
        return await coro
    return await asyncio.wait_for(coro, timeout=timeout)


def extract_json_object(text: str | None) -> dict | None:
    """Return the first balanced JSON object embedded anywhere in text."""
    if not text:
        return None
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    return None


class CompletionClient:
    """Single-turn chat completions against a synchronous LLMProvider."""

    def __init__(
        self,
        provider: LLMProvider,
        timeout: float = 20.0,
        retrying: Callable | None = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self.retrying = retrying

    async def complete(
        self,
        system: str,
        utterance: str,
        max_tokens: int = 200,
        temperature: float | None = None,
    ) -> str:
        """One system instruction, the utterance as the only user turn. Raises on failure."""
        return await run_blocking(
            self.provider.generate,
            messages=[{"role": "user", "content": utterance}],
            system=system,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=self.timeout,
            retrying=self.retrying,
        )

    async def complete_json(
        self,
        system: str,
        utterance: str,
        max_tokens: int = 200,
        temperature: float | None = None,
    ) -> dict | None:
        """Like complete(), returning the first JSON object in the reply (None if absent)."""
        content = await self.complete(system, utterance, max_tokens, temperature)
        obj = extract_json_object(content)
        if obj is None:
            logger.warning("completion.no_json", response=(content or "")[:200])
        return obj
