"""Telegram bot for event notifications and remote trade control."""

import asyncio
import logging
import threading
from typing import Optional

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import (
    Application,
    CommandHandler,
    CallbackQueryHandler,
    ContextTypes,
)
from sqlmodel import Session, select, func

from swing_events.config import settings
from swing_events.engine.ladder import entry_ladder, profit_ladder

logger = logging.getLogger(__name__)

_bot_instance: Optional["TelegramBot"] = None


class TelegramBot:
    """Telegram bot running in a background thread with its own event loop."""

    def __init__(self, token: str, chat_ids: list[int], processor=None):
        self.token = token
        self.chat_ids = set(chat_ids)
        self.processor = processor
        self._app: Optional[Application] = None
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _is_authorized(self, user_id: int) -> bool:
        return user_id in self.chat_ids

    async def _check_auth(self, update: Update) -> bool:
        if not update.effective_user or not self._is_authorized(update.effective_user.id):
            if update.message:
                await update.message.reply_text("Unauthorized.")
            return False
        return True

    async def _cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return

        from swing_events.models.trade import Trade

        with Session(self.processor.engine) as session:
            rows = session.exec(
                select(Trade.status, func.count(Trade.id)).group_by(Trade.status)
            ).all()
        counts = {status: count for status, count in rows}

        text = (
            f"Open trades: {counts.get('open', 0)}\n"
            f"Closed trades: {counts.get('closed', 0)}"
        )
        await update.message.reply_text(text)

    async def _cmd_open(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return

        from swing_events.models.trade import Trade

        with Session(self.processor.engine) as session:
            trades = session.exec(
                select(Trade).where(Trade.status == "open").order_by(Trade.symbol)
            ).all()
            if not trades:
                await update.message.reply_text("No open trades.")
                return
            lines = []
            for trade in trades:
                filled = sum(1 for rung in entry_ladder(trade) if rung.is_filled)
                lines.append(f"#{trade.id} {trade.symbol} {trade.direction} | fills={filled} | stop={trade.stop_price}")

        await update.message.reply_text("\n".join(lines))

    async def _cmd_trade(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return
        if not context.args:
            await update.message.reply_text("Usage: /trade <SYMBOL>")
            return

        from swing_events.models.trade import Trade

        symbol = context.args[0].upper()
        with Session(self.processor.engine) as session:
            trade = session.exec(
                select(Trade).where(Trade.symbol == symbol).order_by(Trade.id.desc())
            ).first()
            if not trade:
                await update.message.reply_text(f"No trade for {symbol}.")
                return
            entries = " / ".join(
                f"{rung.threshold}{'✓' if rung.is_filled else ''}" for rung in entry_ladder(trade)
            )
            profits = " / ".join(
                f"{rung.price}{'✓' if rung.achieved_at else ''}" for rung in profit_ladder(trade)
            )
            text = (
                f"#{trade.id} {trade.symbol} {trade.direction} [{trade.status}]\n"
                f"Entries: {entries}\n"
                f"Profits: {profits}\n"
                f"Stop: {trade.stop_price} ({trade.stop_period})"
            )
        await update.message.reply_text(text)

    async def _cmd_reset(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return
        if len(context.args or []) < 2 or not context.args[0].isdigit():
            await update.message.reply_text("Usage: /reset <trade_id> <reason>")
            return

        trade_id = context.args[0]
        reason = " ".join(context.args[1:])
        context.user_data[f"reset_{trade_id}"] = reason
        keyboard = InlineKeyboardMarkup([
            [
                InlineKeyboardButton("Yes, reset", callback_data=f"confirm_reset:{trade_id}"),
                InlineKeyboardButton("Cancel", callback_data="cancel"),
            ]
        ])
        await update.message.reply_text(
            f"Reset trade #{trade_id} ({reason})? Entries, profits and stops will be cleared.",
            reply_markup=keyboard,
        )

    async def _handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        if not query or not query.from_user or not self._is_authorized(query.from_user.id):
            return

        await query.answer()

        if query.data == "cancel":
            await query.edit_message_text("Cancelled.")
            return

        if query.data.startswith("confirm_reset:"):
            trade_id = query.data.split(":", 1)[1]
            reason = context.user_data.pop(f"reset_{trade_id}", "Reset via Telegram")
            await query.edit_message_text(f"Resetting trade #{trade_id}...")
            try:
                result = await asyncio.to_thread(self.processor.reset, int(trade_id), reason)
            except LookupError as e:
                await query.edit_message_text(str(e))
                return
            await query.edit_message_text(f"Trade #{trade_id}: {result.message}")

    async def send_notification(self, message: str):
        """Send a message to all whitelisted chat IDs."""
        if not self._app or not self._app.bot:
            return
        for chat_id in self.chat_ids:
            try:
                await self._app.bot.send_message(chat_id=chat_id, text=message)
            except Exception as e:
                logger.warning(f"Failed to send Telegram notification to {chat_id}: {e}")

    def _run_bot(self):
        """Run the bot in a background thread with its own event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        self._app = (
            Application.builder()
            .token(self.token)
            .build()
        )

        self._app.add_handler(CommandHandler("status", self._cmd_status))
        self._app.add_handler(CommandHandler("open", self._cmd_open))
        self._app.add_handler(CommandHandler("trade", self._cmd_trade))
        self._app.add_handler(CommandHandler("reset", self._cmd_reset))
        self._app.add_handler(CallbackQueryHandler(self._handle_callback))

        logger.info("Telegram bot starting...")
        self._loop.run_until_complete(self._app.initialize())
        self._loop.run_until_complete(self._app.start())
        self._loop.run_until_complete(self._app.updater.start_polling())
        self._loop.run_forever()

    def start(self):
        self._thread = threading.Thread(target=self._run_bot, daemon=True)
        self._thread.start()

    def stop(self):
        if self._loop and self._app:
            async def _shutdown():
                await self._app.updater.stop()
                await self._app.stop()
                await self._app.shutdown()

            asyncio.run_coroutine_threadsafe(_shutdown(), self._loop).result(timeout=10)
            self._loop.call_soon_threadsafe(self._loop.stop)


class TelegramChatPublisher:
    """Forwards event summaries to the bot without waiting for delivery."""

    def send(self, message: str) -> None:
        bot = get_bot()
        if bot and bot._loop:
            asyncio.run_coroutine_threadsafe(bot.send_notification(message), bot._loop)


def init_bot(processor=None) -> TelegramBot:
    """Initialize and return the bot singleton."""
    global _bot_instance
    _bot_instance = TelegramBot(
        token=settings.telegram_bot_token,
        chat_ids=settings.telegram_chat_ids,
        processor=processor,
    )
    return _bot_instance


def get_bot() -> Optional[TelegramBot]:
    """Get the bot singleton, or None if not initialized."""
    return _bot_instance
