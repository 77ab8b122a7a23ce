"""Renewal reminder messages.

Two paths:
- ``compose_renewal_message`` builds a fixed-template reminder. Always
  available, deterministic, used when no model is configured.
- ``generate_renewal_message`` asks an OpenAI model for a friendlier,
  WhatsApp-style version when ``OPENAI_API_KEY`` is set.

IMPORTANT:
- Nothing here stores the message or sends it; the operator copies it.
- Dates in messages are DD/MM/YYYY built from calendar components.
- The prompt is never logged (it contains the customer's name and phone).
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Mapping, Optional

from app.errors import MessageGenerationError
from app.records import ClientRecord
from app.services.client_status import ClientStatus, client_days_until_renewal, classify
from app.utils.dates import format_display_date, today_local

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

SYSTEM_INSTRUCTION = (
    "You are the personal assistant of a reseller of streaming TV subscriptions. "
    "Write a short WhatsApp renewal reminder for the customer described by the user. "
    "Rules: politely say the plan is about to expire or has expired; include the "
    "payment key exactly as given; say that the renewal is done as soon as the "
    "payment receipt arrives; mention that the customer has been with us since the "
    "given date; use a few TV/movie/payment emojis; return only the message text."
)


def _status_line(client: ClientRecord, today: date) -> str:
    days = client_days_until_renewal(client, today)
    status = classify(days)
    if status is ClientStatus.EXPIRED:
        return f"your plan expired on {format_display_date(client.renewal_date)}"
    if days == 0:
        return "your plan expires today"
    if status is ClientStatus.EXPIRING:
        return f"your plan expires in {days} day{'s' if days != 1 else ''}, on {format_display_date(client.renewal_date)}"
    return f"your plan renews on {format_display_date(client.renewal_date)}"


def compose_renewal_message(
    client: ClientRecord,
    *,
    payment_key: str = "",
    today: Optional[date] = None,
) -> str:
    today = today_local(today)
    lines = [
        f"Hi {client.name}! 📺",
        f"Just a reminder that {_status_line(client, today)}.",
        f"Renewal: {client.price:.2f} for {client.devices} device{'s' if client.devices != 1 else ''}.",
    ]
    if payment_key:
        lines.append(f"Payment key: {payment_key}")
    lines.append("As soon as we receive the payment/receipt, your renewal is done right away!")
    lines.append(f"Thank you for being with us since {format_display_date(client.start_date)}. 🎬")
    return "\n".join(lines)


def build_prompt(client: ClientRecord, *, payment_key: str, today: date) -> str:
    return (
        "Customer data:\n"
        f"- Name: {client.name}\n"
        f"- Customer since: {format_display_date(client.start_date)}\n"
        f"- Renewal date: {format_display_date(client.renewal_date)}\n"
        f"- Status: {classify(client_days_until_renewal(client, today)).value}\n"
        f"- Price: {client.price:.2f}\n"
        f"- Devices: {client.devices}\n"
        f"- Payment key: {payment_key or '(none)'}"
    )


def call_llm(prompt: str, *, api_key: str, model: str, timeout_s: float) -> str:
    """Single OpenAI call. Raises MessageGenerationError on any failure."""
    try:
        from openai import OpenAI
    except ImportError as e:
        raise MessageGenerationError(f"OpenAI SDK not installed: {e}") from e

    client = OpenAI(api_key=api_key, timeout=timeout_s)
    try:
        resp = client.responses.create(
            model=model,
            instructions=SYSTEM_INSTRUCTION,
            input=prompt,
        )
    except Exception as e:
        logger.exception("OpenAI call failed")
        raise MessageGenerationError(f"AI request failed: {e}") from e

    usage = getattr(resp, "usage", None)
    if usage is not None:
        logger.info(
            "AI usage model=%s input_tokens=%s output_tokens=%s",
            model,
            getattr(usage, "input_tokens", None),
            getattr(usage, "output_tokens", None),
        )

    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text.strip()
    raise MessageGenerationError("AI response contained no text.")


def generate_renewal_message(
    client: ClientRecord,
    *,
    settings: Mapping[str, Any],
    today: Optional[date] = None,
) -> Dict[str, str]:
    """Return ``{"message": ..., "source": "ai" | "template"}``."""
    today = today_local(today)
    payment_key = (settings.get("PAYMENT_KEY") or "").strip()
    api_key = (settings.get("OPENAI_API_KEY") or "").strip()

    if not api_key:
        return {
            "message": compose_renewal_message(client, payment_key=payment_key, today=today),
            "source": "template",
        }

    text = call_llm(
        build_prompt(client, payment_key=payment_key, today=today),
        api_key=api_key,
        model=settings.get("OPENAI_MODEL") or DEFAULT_MODEL,
        timeout_s=float(settings.get("OPENAI_TIMEOUT_S") or 30),
    )
    return {"message": text, "source": "ai"}
