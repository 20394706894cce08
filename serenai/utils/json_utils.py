# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def extract_json_block(blob: str) -> str:
    """
    Strip markdown fences from an LLM response, returning the best-effort JSON text.
    """
    text = (blob or "").strip()
    match = _FENCE_RE.search(text)
    if match:
        text = match.group(1)
    return text.strip()


def parse_llm_json(blob: str):
    """
    Parse JSON out of an LLM reply. A second attempt drops trailing commas.
    Raises ValueError when neither attempt yields JSON.
    """
    text = extract_json_block(blob)
    try:
        return json.loads(text)
    except ValueError:
        pass

    repaired = _TRAILING_COMMA_RE.sub(r"\1", text)
    try:
        return json.loads(repaired)
    except ValueError as e:
        raise ValueError("LLM reply is not valid JSON") from e


def normalize_tags(tags) -> list:
    """Ordered, de-duplicated list of non-empty tag strings."""
    seen = []
    for tag in tags or []:
        if not isinstance(tag, str):
            continue
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
