# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.orm import Session
from serenai.models.database import SessionLocal
from serenai.services import openai_service

router = APIRouter(tags=["Infra"])
logger = logging.getLogger(__name__)


@router.get("/healthz")
def health_check(request: Request):
    db: Session = SessionLocal()
    result = {
        "db_connection": False,
        "scheduler_running": False,
        "llm_configured": bool(openai_service.OPENAI_API_KEY),
    }

    try:
        # ✅ Check DB read
        db.execute(text("SELECT 1"))
        result["db_connection"] = True

        # ✅ Reminder scheduler thread
        scheduler = getattr(request.app.state, "reminder_scheduler", None)
        result["scheduler_running"] = bool(scheduler and scheduler.running)

        return {
            "status": "ok" if all(result.values()) else "partial",
            "details": result
        }

    except Exception:
        logger.exception("🛑 Health check failed")
        return {
            "status": "error",
            "details": result
        }

    finally:
        db.close()
