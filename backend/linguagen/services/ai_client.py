"""
AI client — one chat-completion entry point for the lesson generator.

Provider: Anthropic Messages API via the official SDK.  The credential is passed
in by the caller (the key saved in Settings, or ANTHROPIC_API_KEY from .env);
this module never looks it up on its own.
"""

import asyncio

import anthropic

from linguagen.config import settings


def _anthropic_call(
    system: str,
    messages: list[dict],
    api_key: str,
    max_tokens: int,
    temperature: float,
) -> str:
    client = anthropic.Anthropic(api_key=api_key)
    response = client.messages.create(
        model=settings.ANTHROPIC_MODEL,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,
        messages=messages,
    )
    return "".join(
        block.text for block in response.content if getattr(block, "type", "") == "text"
    )


async def chat(
    system: str,
    messages: list[dict],
    api_key: str,
    max_tokens: int = 400,
    temperature: float = 0.7,
) -> str:
    """
    Send a chat completion request and return the reply text.

    The SDK call is blocking, so it runs in a worker thread to keep the event
    loop free while a lesson is being written.
    """
    try:
        return await asyncio.to_thread(
            _anthropic_call, system, messages, api_key, max_tokens, temperature
        )
    except anthropic.APIError as e:
        raise RuntimeError(f"Anthropic error: {e}") from e


def ai_provider_name(api_key: str) -> str:
    if api_key:
        return f"Anthropic ({settings.ANTHROPIC_MODEL})"
    return "none"
