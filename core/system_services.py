# ghost/core/system_services.py
"""
System services management for Ghost invite tracker.
Handles service lifecycle and graceful shutdown.
"""
import asyncio
import logging
import signal
from typing import Optional

import discord

from config import Config
from invite_system.ports import Notifier
from invite_system.tracker import InviteTracker

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Manager for background services.
    Handles service lifecycle and graceful shutdown.
    """

    def __init__(self, tracker: InviteTracker, notifier: Notifier):
        """
        Initialize service manager.

        Args:
            tracker: Invite tracker (leaderboard source)
            notifier: Direct message sender for reports
        """
        self.tracker = tracker
        self.notifier = notifier

        # Service instances for graceful shutdown
        self.dashboard: Optional['DashboardServer'] = None
        self.weekly_report: Optional['WeeklyReportScheduler'] = None

    async def start_services(self) -> None:
        """
        Start all background services.

        Services to start:
        - Ranking dashboard (aiohttp), unless DASHBOARD_ENABLED=0
        - Weekly report (APScheduler), unless WEEKLY_REPORT_ENABLED=0
        """
        logger.info("=" * 60)
        logger.info("STARTING BACKGROUND SERVICES")
        logger.info("=" * 60)

        # ═══════════════════════════════════════════════════════════════
        # SERVICE 1: Ranking Dashboard
        # ═══════════════════════════════════════════════════════════════
        if Config.get(Config.DASHBOARD_ENABLED, True):
            from web.dashboard import DashboardServer

            self.dashboard = DashboardServer(
                self.tracker.getLeaderboard,
                port=Config.get(Config.DASHBOARD_PORT, 3000),
            )
            await self.dashboard.start()
            logger.info("✓ Dashboard started")
        else:
            logger.info("Dashboard disabled")

        # ═══════════════════════════════════════════════════════════════
        # SERVICE 2: Weekly Report
        # ═══════════════════════════════════════════════════════════════
        if Config.get(Config.WEEKLY_REPORT_ENABLED, True):
            from background.weekly_report import WeeklyReportScheduler

            self.weekly_report = WeeklyReportScheduler(
                self.notifier,
                cron_expression=Config.get(Config.WEEKLY_REPORT_CRON, "0 10 * * 1"),
            )
            await self.weekly_report.start()
            logger.info("✓ Weekly report started")
        else:
            logger.info("Weekly report disabled")

        logger.info("=" * 60)
        logger.info("✅ BACKGROUND SERVICES STARTED")
        logger.info("=" * 60)

    async def stop_services(self) -> None:
        """Stop all background services gracefully."""
        logger.info("=" * 60)
        logger.info("STOPPING BACKGROUND SERVICES")
        logger.info("=" * 60)

        if self.weekly_report:
            logger.info("Stopping weekly report...")
            await self.weekly_report.stop()
            self.weekly_report = None

        if self.dashboard:
            logger.info("Stopping dashboard...")
            await self.dashboard.stop()
            self.dashboard = None

        logger.info("=" * 60)
        logger.info("✅ ALL BACKGROUND SERVICES STOPPED")
        logger.info("=" * 60)


# ═══════════════════════════════════════════════════════════════════════════
# GRACEFUL SHUTDOWN
# ═══════════════════════════════════════════════════════════════════════════

async def shutdown(signal_type: signal.Signals, client: discord.Client, service_manager: ServiceManager) -> None:
    """
    Cleanup tasks on shutdown.

    Args:
        signal_type: Signal that triggered shutdown
        client: Discord client
        service_manager: Running services
    """
    logger.info(f"Received exit signal {signal_type.name}...")

    await service_manager.stop_services()

    logger.info("Closing Discord connection...")
    await client.close()

    logger.info("✓ Shutdown complete")


def setup_signal_handlers(loop: asyncio.AbstractEventLoop, client: discord.Client,
                          service_manager: ServiceManager) -> None:
    """
    Setup signal handlers for graceful shutdown.

    Args:
        loop: Event loop
        client: Discord client
        service_manager: Running services
    """
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s, client, service_manager))
            )
        except NotImplementedError:
            # Signal handlers not available on Windows
            logger.warning(f"Signal handler for {sig} not available on this platform")


# ═══════════════════════════════════════════════════════════════════════════
# EXPORT
# ═══════════════════════════════════════════════════════════════════════════

__all__ = [
    'ServiceManager',
    'shutdown',
    'setup_signal_handlers',
]
