# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.


# Moderation categories that short-circuit the chat into the crisis reply
SEVERE_CATEGORIES = frozenset([
    "sexual/violent",
    "self-harm",
    "sexual/minors",
    "hate/threatening",
    "violence/graphic",
])

CRISIS_RESPONSE = (
    "I notice you might be going through a difficult time. If you're in crisis, please reach out to a crisis hotline. "
    "In the US, you can call or text 988 to reach the Suicide & Crisis Lifeline. "
    "You can also text HOME to 741741 to connect with the Crisis Text Line. "
    "These services are free, confidential, and available 24/7."
)


def severe_categories(categories: dict) -> list:
    """Names of the severe categories set in a moderation category map."""
    return sorted(name for name, flagged in (categories or {}).items() if flagged and name in SEVERE_CATEGORIES)