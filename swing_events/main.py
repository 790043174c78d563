"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from swing_events.config import settings
from swing_events.database import engine, create_db_and_tables
from swing_events.engine.router import EventProcessor
from swing_events.services.publishers import build_publishers
from swing_events.utils.logging import setup_logging
from swing_events.api import events, trades, system


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()

    chat = None
    if settings.telegram_bot_token:
        from swing_events.services.telegram_bot import TelegramChatPublisher
        chat = TelegramChatPublisher()

    publishers = build_publishers(settings, chat=chat)
    app.state.processor = EventProcessor(engine, publishers)

    # Start Telegram bot if configured
    telegram_bot = None
    if settings.telegram_bot_token:
        from swing_events.services.telegram_bot import init_bot
        telegram_bot = init_bot(app.state.processor)
        telegram_bot.start()

    yield

    if telegram_bot:
        telegram_bot.stop()
    publishers.close()


app = FastAPI(
    title="Swing Events",
    description="Trade lifecycle event processor for actively managed swing trades",
    version="0.1.0",
    lifespan=lifespan,
)

# Mount routers
app.include_router(events.router)
app.include_router(trades.router)
app.include_router(system.router)
