# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the SerenAI - Mental Wellness Companion project.
# Licensed under the MIT License - see the LICENSE file for details.

"""
Server-side reminder scheduling.

One ReminderScheduler is built in the app lifespan, kept on `app.state` and
handed to routes through `get_scheduler`. It owns an APScheduler
BackgroundScheduler with the recurring wellness jobs plus one-shot custom
reminders; every job writes Notification rows through its own session.
"""

import logging
import time
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import Request
from pytz import utc
from sqlalchemy.orm import Session

from serenai.models.activity_session import ActivitySession
from serenai.models.database import SessionLocal
from serenai.models.journal import JournalEntry
from serenai.models.notification import Notification
from serenai.models.user import User
from serenai.services.activity_aggregator import weekly_insight_stats
from serenai.services.notification_service import add_notification
from serenai.utils.time_utils import APP_TIMEZONE, local_midnight_utc, to_local

logger = logging.getLogger("scheduler")

DAILY_REMINDER_TITLE = "Daily Reminder"
DAILY_REMINDER_MESSAGE = "Don't forget to complete your journal entry for today."
WEEKLY_SUMMARY_TITLE = "Weekly Summary"
ACHIEVEMENT_TITLE = "Achievement Unlocked!"
ACHIEVEMENT_MESSAGE = "Congratulations! You completed another month of wellness activities!"


class ReminderScheduler:

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal, tz=None, scheduler=None):
        self.session_factory = session_factory
        self.tz = tz or APP_TIMEZONE
        self.scheduler = scheduler or BackgroundScheduler(
            job_defaults={"misfire_grace_time": 60},
            timezone=self.tz,
        )
        self._register_jobs()

    def _register_jobs(self):
        # 🕘 Every hour; users pick their own reminder hour
        self.scheduler.add_job(
            self.send_daily_reminders, "cron", minute=0,
            id="daily-reminders", replace_existing=True,
        )
        # 🗓️ Sundays at 6 PM
        self.scheduler.add_job(
            self.send_weekly_summaries, "cron", day_of_week="sun", hour=18, minute=0,
            id="weekly-summaries", replace_existing=True,
        )
        # 🗓️ 1st of the month at 9 AM
        self.scheduler.add_job(
            self.check_monthly_achievements, "cron", day=1, hour=9, minute=0,
            id="monthly-achievements", replace_existing=True,
        )

    # ---------------------------
    # ✅ Lifecycle
    # ---------------------------

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("⏰ Reminder scheduler started (%s).", self.tz)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("⏹️ Reminder scheduler stopped.")

    def _run(self, name: str, job) -> int:
        db = self.session_factory()
        start = time.time()
        try:
            logger.info(f"🔹 Running job: {name}")
            sent = job(db)
            duration = round(time.time() - start, 2)
            logger.info(f"✅ Completed {name} in {duration} sec. Notifications sent: {sent}")
            return sent
        except Exception as e:
            db.rollback()
            logger.error(f"🛑 {name} failed: {e}", exc_info=True)
            return 0
        finally:
            db.close()

    # ---------------------------
    # ✅ Recurring jobs
    # ---------------------------

    def send_daily_reminders(self, now: Optional[datetime] = None) -> int:
        return self._run("DailyReminders", lambda db: self._daily_reminders(db, now or datetime.utcnow()))

    def send_weekly_summaries(self, now: Optional[datetime] = None) -> int:
        return self._run("WeeklySummaries", lambda db: self._weekly_summaries(db, now or datetime.utcnow()))

    def check_monthly_achievements(self, now: Optional[datetime] = None) -> int:
        return self._run("MonthlyAchievements", lambda db: self._monthly_achievements(db, now or datetime.utcnow()))

    def _daily_reminders(self, db: Session, now: datetime) -> int:
        local_now = to_local(now, self.tz)
        today_start = local_midnight_utc(local_now.date(), self.tz)

        users = (
            db.query(User)
            .filter(
                User.notifications_enabled.is_(True),
                User.daily_reminder_enabled.is_(True),
                User.reminder_hour == local_now.hour,
            )
            .all()
        )

        sent = 0
        for user in users:
            journaled_today = (
                db.query(JournalEntry.id)
                .filter(JournalEntry.user_id == user.id, JournalEntry.created_at >= today_start)
                .first()
            )
            if journaled_today:
                continue

            if add_notification(
                db, user.id, DAILY_REMINDER_TITLE, DAILY_REMINDER_MESSAGE,
                notification_type="reminder",
                action_label="Write in Journal", action_href="/dashboard/journal",
                now=now,
            ):
                sent += 1
        return sent

    def _weekly_summaries(self, db: Session, now: datetime) -> int:
        users = (
            db.query(User)
            .filter(User.notifications_enabled.is_(True), User.weekly_digest_enabled.is_(True))
            .all()
        )

        sent = 0
        for user in users:
            stats = weekly_insight_stats(db, user, now=now, tz=self.tz)
            message = (
                f"This week you logged {stats['mood_records']} mood check-ins, "
                f"{stats['journal_entries']} journal entries and {stats['chat_sessions']} conversations. "
                f"Your mood trend is {stats['mood_trend']}."
            )
            if add_notification(
                db, user.id, WEEKLY_SUMMARY_TITLE, message,
                notification_type="digest",
                action_label="View Insights", action_href="/dashboard/insights",
                now=now,
            ):
                sent += 1
        return sent

    def _monthly_achievements(self, db: Session, now: datetime) -> int:
        month_ago = now - timedelta(days=30)
        today_start = local_midnight_utc(to_local(now, self.tz).date(), self.tz)

        active_user_ids = {
            uid for (uid,) in
            db.query(ActivitySession.user_id).filter(ActivitySession.created_at >= month_ago).distinct().all()
        }
        if not active_user_ids:
            return 0

        users = (
            db.query(User)
            .filter(User.id.in_(active_user_ids), User.notifications_enabled.is_(True))
            .all()
        )

        sent = 0
        for user in users:
            already_sent = (
                db.query(Notification.id)
                .filter(
                    Notification.user_id == user.id,
                    Notification.notification_type == "achievement",
                    Notification.created_at >= today_start,
                )
                .first()
            )
            if already_sent:
                continue

            if add_notification(
                db, user.id, ACHIEVEMENT_TITLE, ACHIEVEMENT_MESSAGE,
                notification_type="achievement", now=now,
            ):
                sent += 1
        return sent

    # ---------------------------
    # ✅ Custom one-shot reminders
    # ---------------------------

    def schedule_custom_reminder(
        self,
        user_id: int,
        title: str,
        message: str,
        run_at: datetime,
        action_label: Optional[str] = None,
        action_href: Optional[str] = None,
    ) -> str:
        if run_at.tzinfo is None:
            run_at = utc.localize(run_at)
        if run_at <= datetime.now(utc):
            raise ValueError("Reminder time must be in the future")

        job_id = f"custom-{user_id}-{uuid.uuid4().hex[:12]}"
        self.scheduler.add_job(
            self.deliver_custom_reminder,
            "date",
            run_date=run_at,
            id=job_id,
            args=[user_id, title, message, action_label, action_href],
        )
        logger.info("⏰ Scheduled reminder %s for user %s at %s", job_id, user_id, run_at.isoformat())
        return job_id

    def deliver_custom_reminder(self, user_id: int, title: str, message: str,
                                action_label: Optional[str] = None, action_href: Optional[str] = None) -> int:
        def _deliver(db: Session) -> int:
            if not db.query(User.id).filter(User.id == user_id).first():
                logger.info("⏭️ Skipping reminder for missing user %s", user_id)
                return 0

            notification = add_notification(
                db, user_id, title, message,
                notification_type="reminder",
                action_label=action_label, action_href=action_href,
            )
            return 1 if notification else 0

        return self._run("CustomReminder", _deliver)

    def list_reminders(self, user_id: int) -> List[dict]:
        prefix = f"custom-{user_id}-"
        reminders = []
        for job in self.scheduler.get_jobs():
            if not job.id.startswith(prefix):
                continue
            run_date = getattr(job.trigger, "run_date", None)
            reminders.append({
                "id": job.id,
                "title": job.args[1],
                "message": job.args[2],
                "run_at": run_date.isoformat() if run_date else None,
            })
        return reminders

    def cancel_reminder(self, user_id: int, job_id: str) -> bool:
        if not job_id.startswith(f"custom-{user_id}-"):
            return False
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        logger.info("🗑️ Cancelled reminder %s", job_id)
        return True

    def cancel_all(self, user_id: int) -> int:
        """Drop every pending custom reminder of the user. Returns how many were removed."""
        prefix = f"custom-{user_id}-"
        removed = 0
        for job in self.scheduler.get_jobs():
            if not job.id.startswith(prefix):
                continue
            try:
                self.scheduler.remove_job(job.id)
            except JobLookupError:
                continue
            removed += 1
        if removed:
            logger.info("🗑️ Cancelled %d reminders of user %s", removed, user_id)
        return removed


def get_scheduler(request: Request) -> ReminderScheduler:
    return request.app.state.reminder_scheduler
