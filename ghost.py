# ghost/ghost.py
"""
Ghost Bot - Main entry point.
Discord personal invite tracker on discord.py 2.x.
"""
import asyncio
import logging
import sys

from config import Config, ConfigurationError
from core.db import setup_database
from core.system_services import ServiceManager, setup_signal_handlers
from discord_gateway.client import GhostClient
from invite_system.settings import TrackerSettings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('ghost.log')
    ]
)

logger = logging.getLogger(__name__)


def initialize_bot():
    """
    Initialize bot with all services and configurations.

    Returns:
        Tuple[GhostClient, ServiceManager]: Initialized instances
    """
    try:
        logger.info("=" * 60)
        logger.info("GHOST BOT INITIALIZATION")
        logger.info("=" * 60)

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 1: Load configuration from .env
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("📋 Loading configuration from .env...")
        Config.initialize_from_env()
        logger.info("✓ Configuration loaded")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 2: Validate critical configuration
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("🔍 Validating critical configuration keys...")
        Config.validate_critical_keys()
        logger.info("✓ Configuration validated")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 3: Setup database
        # ═══════════════════════════════════════════════════════════════════════
        logger.info("💾 Setting up database...")
        setup_database()
        logger.info("✓ Database ready")

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 4: Initialize client and invite tracker
        # ═══════════════════════════════════════════════════════════════════════
        settings = TrackerSettings.from_config()
        client = GhostClient(
            guild_id=Config.get(Config.GUILD_ID),
            verify_channel_id=Config.get(Config.VERIFY_CHANNEL_ID),
            settings=settings,
        )
        logger.info(
            f"🤖 Tracker ready: min account age {settings.min_account_age_days}d, "
            f"min stay {settings.min_stay_hours}h"
        )

        # ═══════════════════════════════════════════════════════════════════════
        # STEP 5: Background services start once the gateway is ready
        # ═══════════════════════════════════════════════════════════════════════
        service_manager = ServiceManager(client.tracker, client.adapter)
        client.add_ready_callback(service_manager.start_services)

        logger.info("=" * 60)
        logger.info("✅ INITIALIZATION COMPLETE")
        logger.info("=" * 60)

        return client, service_manager

    except Exception as e:
        logger.critical(f"❌ Initialization failed: {e}", exc_info=True)
        raise


async def main():
    """Main entry point."""
    client = None
    service_manager = None
    try:
        client, service_manager = initialize_bot()

        # Setup signal handlers for graceful shutdown
        loop = asyncio.get_running_loop()
        setup_signal_handlers(loop, client, service_manager)

        logger.info("🔄 Connecting to Discord...")
        async with client:
            await client.start(Config.get(Config.TOKEN))

    except ConfigurationError as e:
        logger.critical(f"❌ Configuration error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("⚠️ Bot stopped by user")
    except Exception as e:
        logger.critical(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if service_manager is not None:
            await service_manager.stop_services()
        logger.info("👋 Bot shutdown complete")


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped")


if __name__ == '__main__':
    run()
