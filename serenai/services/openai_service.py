# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests

from serenai.utils.json_utils import parse_llm_json
from serenai.utils.prompt_templates import (
    COMPANION_SYSTEM_PROMPT,
    JOURNAL_PROMPT_SYSTEM,
    SENTIMENT_SYSTEM,
    journal_prompt_request,
)

# ---------------------------
# ✅ Logger Setup
# ---------------------------

logger = logging.getLogger(__name__)

# ---------------------------
# ✅ Environment Variables
# ---------------------------

if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")
CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o")
MODERATION_MODEL = os.getenv("OPENAI_MODERATION_MODEL", "omni-moderation-latest")
REQUEST_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "60"))

# ---------------------------
# ✅ Fallback replies
# ---------------------------

CHAT_FALLBACK = "I'm experiencing some technical difficulties right now. Please try again later."
EMPTY_CHAT_REPLY = "I'm sorry, I couldn't generate a response."
JOURNAL_PROMPT_FALLBACK = "What's on your mind today?"
EMPTY_JOURNAL_PROMPT = "What are you grateful for today?"


@dataclass
class ModerationResult:
    flagged: bool = False
    # Open mapping: the provider adds categories over time
    categories: Dict[str, bool] = field(default_factory=dict)


def _headers() -> dict:
    headers = {"Content-Type": "application/json"}
    if OPENAI_API_KEY:
        headers["Authorization"] = f"Bearer {OPENAI_API_KEY}"
    return headers


def _post(path: str, payload: dict) -> dict:
    response = requests.post(
        f"{OPENAI_BASE_URL}{path}",
        headers=_headers(),
        json=payload,
        timeout=REQUEST_TIMEOUT,
    )
    response.raise_for_status()
    return response.json()


def _chat_completion(messages: List[dict], temperature: float, max_tokens: int) -> Optional[str]:
    result = _post(
        "/chat/completions",
        {
            "model": CHAT_MODEL,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        },
    )
    choices = result.get("choices") or []
    if not choices:
        return None
    return ((choices[0] or {}).get("message") or {}).get("content")


def generate_chat_response(messages: List[dict], system_prompt: Optional[str] = None) -> str:
    """
    Send the conversation turns (oldest first) with a system prompt and return the reply text.
    Never raises: provider failures come back as a friendly fallback string.
    """
    payload = [{"role": "system", "content": system_prompt or COMPANION_SYSTEM_PROMPT}]
    payload.extend({"role": m["role"], "content": m["content"]} for m in messages)

    try:
        content = _chat_completion(payload, temperature=0.7, max_tokens=1000)
        return content or EMPTY_CHAT_REPLY
    except Exception:
        logger.exception("❌ Error generating chat response.")
        return CHAT_FALLBACK


def generate_journal_prompt(user_mood: Optional[float] = None) -> str:
    messages = [
        {"role": "system", "content": JOURNAL_PROMPT_SYSTEM},
        {"role": "user", "content": journal_prompt_request(user_mood)},
    ]
    try:
        content = _chat_completion(messages, temperature=0.8, max_tokens=150)
        return (content or EMPTY_JOURNAL_PROMPT).strip()
    except Exception:
        logger.exception("❌ Error generating journal prompt.")
        return JOURNAL_PROMPT_FALLBACK


def analyze_sentiment(text: str) -> dict:
    messages = [
        {"role": "system", "content": SENTIMENT_SYSTEM},
        {"role": "user", "content": text},
    ]
    try:
        content = _chat_completion(messages, temperature=0.3, max_tokens=200)
    except Exception:
        logger.exception("❌ Error analyzing sentiment.")
        return {"mood": 5, "emotions": [], "summary": "Error analyzing sentiment"}

    try:
        parsed = parse_llm_json(content or "{}")
    except ValueError:
        logger.warning("⚠️ Could not parse sentiment analysis: %r", content)
        return {"mood": 5, "emotions": [], "summary": "Unable to analyze sentiment"}

    if not isinstance(parsed, dict):
        return {"mood": 5, "emotions": [], "summary": "Unable to analyze sentiment"}
    return parsed


def moderate_content(text: str) -> ModerationResult:
    """
    Classify text with the moderation endpoint. Fails open (not flagged) when the provider is unreachable.
    """
    try:
        result = _post("/moderations", {"model": MODERATION_MODEL, "input": text})
    except Exception:
        logger.exception("❌ Error moderating content.")
        return ModerationResult()

    results = result.get("results") or []
    if not results:
        return ModerationResult()

    first = results[0] or {}
    categories = {str(k): bool(v) for k, v in (first.get("categories") or {}).items()}
    return ModerationResult(flagged=bool(first.get("flagged")), categories=categories)
