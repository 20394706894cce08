# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from slowapi import Limiter
from slowapi.util import get_remote_address

if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")

# LLM-backed endpoints get their own limits
CHAT_RATE_LIMIT = os.getenv("CHAT_RATE_LIMIT", "20/minute")
GENERATE_RATE_LIMIT = os.getenv("GENERATE_RATE_LIMIT", "5/minute")

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
