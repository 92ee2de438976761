from __future__ import annotations

import logging
from typing import Any

import httpx

from . import settings
from .insight import InsightContext, build_chat_request

log = logging.getLogger(__name__)


class SuggestionError(RuntimeError):
    status_code = 500


class RateLimitedError(SuggestionError):
    status_code = 429

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded. Please try again later.")


class PaymentRequiredError(SuggestionError):
    status_code = 402

    def __init__(self) -> None:
        super().__init__("Payment required. Please add credits to your workspace.")


class SuggestionGatewayError(SuggestionError):
    status_code = 500


def _extract_content(data: Any) -> Any:
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None


def request_suggestions(ctx: InsightContext, client: httpx.Client | None = None) -> Any:
    """One chat-completion call; returns the raw message content.

    No retry. Status 429 and 402 map to their own errors, anything else that
    goes wrong is a SuggestionGatewayError.
    """
    api_key = settings.AI_GATEWAY_API_KEY
    if not api_key:
        raise SuggestionGatewayError("AI_GATEWAY_API_KEY is not configured")

    body = build_chat_request(ctx)
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    kwargs: dict[str, Any] = {"json": body, "headers": headers}
    if settings.AI_TIMEOUT_SECONDS is not None:
        kwargs["timeout"] = settings.AI_TIMEOUT_SECONDS

    try:
        if client is not None:
            response = client.post(settings.AI_GATEWAY_URL, **kwargs)
        else:
            response = httpx.post(settings.AI_GATEWAY_URL, **kwargs)
    except httpx.HTTPError as exc:
        log.error("AI gateway request failed: %s", exc)
        raise SuggestionGatewayError("AI gateway error") from exc

    if response.status_code == 429:
        raise RateLimitedError()
    if response.status_code == 402:
        raise PaymentRequiredError()
    if response.is_error:
        log.error("AI gateway error: %s %s", response.status_code, response.text)
        raise SuggestionGatewayError("AI gateway error")

    try:
        data = response.json()
    except ValueError as exc:
        log.error("AI gateway returned non-JSON body: %s", response.text[:200])
        raise SuggestionGatewayError("AI gateway error") from exc

    content = _extract_content(data)
    if not content:
        raise SuggestionGatewayError("No suggestions received from AI")
    return content
