# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
At-rest encryption for the private text columns (journal bodies, mood notes, chat turns).

FERNET_SECRET is the key new values are written with. FERNET_PREVIOUS_SECRETS is an
optional comma-separated list of retired keys that are still accepted on read, so a key
can be rotated without making existing rows unreadable.
"""

import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from sqlalchemy.types import TypeDecorator, Text

logger = logging.getLogger(__name__)

# ✅ Optional: load from .env in dev
if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()


class DecryptionError(ValueError):
    """A stored value is not a token any configured key can open."""


def build_cipher(secret: Optional[str], previous: str = "") -> MultiFernet:
    if not secret:
        raise EnvironmentError("FERNET_SECRET is missing. Please set it in your environment or .env file.")

    keys = [secret] + [k.strip() for k in previous.split(",") if k.strip()]
    try:
        return MultiFernet([Fernet(k) for k in keys])
    except (TypeError, ValueError) as e:
        raise ValueError("FERNET_SECRET or FERNET_PREVIOUS_SECRETS holds an invalid key. "
                         "Each key must be a 32-byte url-safe base64 string.") from e


# 🔐 Primary key first; it encrypts, all of them decrypt
cipher = build_cipher(os.getenv("FERNET_SECRET"), os.getenv("FERNET_PREVIOUS_SECRETS", ""))


def encrypt(text: str, key: Optional[MultiFernet] = None) -> str:
    return (key or cipher).encrypt(text.encode()).decode()


def decrypt(token: str, key: Optional[MultiFernet] = None) -> str:
    try:
        return (key or cipher).decrypt(token.encode()).decode()
    except InvalidToken:
        logger.error("🔐 Stored value could not be decrypted with the configured keys")
        raise DecryptionError(
            "Stored value could not be decrypted. Check FERNET_SECRET and FERNET_PREVIOUS_SECRETS."
        ) from None


class EncryptedText(TypeDecorator):
    """Text column stored as a Fernet token."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else encrypt(value)

    def process_result_value(self, value, dialect):
        return None if value is None else decrypt(value)
