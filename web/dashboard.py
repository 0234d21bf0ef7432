# web/dashboard.py
"""
Ranking dashboard - read-only HTTP API over the inviter leaderboard.

    GET /                 health check
    GET /ranking          top 10
    GET /ranking/{limit}  top N, clamped to [1, 100]
"""
import logging
from typing import Callable, List, Optional

from aiohttp import web

from invite_system.services.inviter_counter import LeaderboardEntry

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

LeaderboardProvider = Callable[[int], List[LeaderboardEntry]]


def clamp_limit(raw: Optional[str]) -> int:
    try:
        value = int(raw) if raw else DEFAULT_LIMIT
    except ValueError:
        value = DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, value))


class DashboardServer:
    """aiohttp application serving the ranking."""

    def __init__(self, leaderboard: LeaderboardProvider, port: int = 3000, host: str = "0.0.0.0"):
        self.leaderboard = leaderboard
        self.port = port
        self.host = host
        self.app = self.create_app()
        self.runner: Optional[web.AppRunner] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get('/', self.handle_health)
        app.router.add_get('/ranking', self.handle_ranking)
        app.router.add_get('/ranking/{limit}', self.handle_ranking)
        return app

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text="OK", content_type="text/plain")

    async def handle_ranking(self, request: web.Request) -> web.Response:
        limit = clamp_limit(request.match_info.get('limit'))
        entries = self.leaderboard(limit)
        return web.json_response({
            "ok": True,
            "limit": limit,
            "data": [{"user_id": e.user_id, "real_joins": e.count} for e in entries],
        })

    async def start(self):
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, self.host, self.port)
        await site.start()
        logger.info(f"🌐 Dashboard API: http://localhost:{self.port}")
        logger.info("   GET /ranking | GET /ranking/:limit")

    async def stop(self):
        if self.runner is not None:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Dashboard stopped")
