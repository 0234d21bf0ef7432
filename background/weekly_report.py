# background/weekly_report.py
"""
Weekly report - DMs every inviter with a real count their rank and the top 10.
Uses APScheduler with a crontab expression.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core import texts
from core.db import get_db_session_ctx
from invite_system.ports import Notifier
from invite_system.services.inviter_counter import InviterCounter
from invite_system.services.rank_engine import summarize

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10


class WeeklyReportScheduler:
    """
    Background scheduler for the weekly invite report.
    """

    def __init__(self, notifier: Notifier, cron_expression: str = "0 10 * * 1", timezone_name: Optional[str] = None):
        """
        Initialize scheduler.

        Args:
            notifier: Direct message sender
            cron_expression: Crontab (minute hour day month day_of_week)
            timezone_name: Scheduler timezone, local server time if None
        """
        self.notifier = notifier
        self.cron_expression = cron_expression
        self.isRunning = False

        scheduler_kwargs = {
            'job_defaults': {
                'coalesce': True,  # Combine missed runs into one
                'max_instances': 1,  # Only one instance of each job at a time
                'misfire_grace_time': 300  # 5 minutes grace period
            }
        }
        if timezone_name:
            scheduler_kwargs['timezone'] = timezone_name
        self.scheduler = AsyncIOScheduler(**scheduler_kwargs)

        self.stats = {
            "reportsSent": 0,
            "runs": 0,
            "errors": 0,
            "lastError": None,
            "lastExecutedAt": None,
        }

    async def start(self):
        if self.isRunning:
            logger.warning("Weekly report scheduler already running")
            return

        trigger = CronTrigger.from_crontab(self.cron_expression)
        self.scheduler.add_job(
            func=self._safe_report_wrapper,
            trigger=trigger,
            id='weekly_report',
            name='Weekly Invite Report',
            replace_existing=True
        )
        self.scheduler.start()
        self.isRunning = True
        logger.info(f"⏰ Weekly report cron active: \"{self.cron_expression}\"")

    async def stop(self):
        if not self.isRunning:
            return

        logger.info("Stopping weekly report scheduler...")
        self.isRunning = False
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def _safe_report_wrapper(self):
        try:
            await self.send_reports()
        except Exception as e:
            self.stats["errors"] += 1
            self.stats["lastError"] = str(e)
            logger.error(f"⚠️ Weekly report failed: {e}", exc_info=True)

    async def send_reports(self) -> int:
        """
        Send the report to every inviter with at least one real join.

        Returns:
            Number of users messaged successfully
        """
        with get_db_session_ctx() as session:
            inviters = InviterCounter(session).all_ranked(min_count=1)

        self.stats["runs"] += 1
        self.stats["lastExecutedAt"] = datetime.now(timezone.utc)

        if not inviters:
            logger.info("Weekly report: no inviters with real joins, nothing to send")
            return 0

        leaderboard = texts.leaderboard_text(inviters[:LEADERBOARD_SIZE])

        sent = 0
        for entry in inviters:
            message = texts.weekly_report_text(summarize(entry.count), leaderboard)
            try:
                delivered = await self.notifier.notify(entry.user_id, message)
            except Exception as e:
                logger.warning(f"Weekly report to {entry.user_id} failed: {e}")
                delivered = False
            if delivered:
                sent += 1

        self.stats["reportsSent"] += sent
        logger.info(f"📩 Weekly report sent to {sent}/{len(inviters)} users.")
        return sent
