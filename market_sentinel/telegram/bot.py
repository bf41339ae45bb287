"""
Telegram Command Bot
Inbound chat commands, answered by the sentinel service
"""

import logging
from typing import Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from market_sentinel.services.orchestrator import SentinelService

logger = logging.getLogger(__name__)

COMMANDS = ("start", "help", "weekly", "fund", "monthly", "tiers")


class CommandBot:
    """
    Polling bot bound to one chat

    Messages from other chats are ignored.
    """

    def __init__(self, token: str, chat_id: Optional[str], service: SentinelService):
        if not token:
            raise ValueError("TELEGRAM_BOT_TOKEN not set")
        self.token = token
        self.chat_id = str(chat_id) if chat_id else None
        self.service = service
        self.application: Optional[Application] = None

    def _authorized(self, update: Update) -> bool:
        chat = update.effective_chat
        if self.chat_id is None or chat is None:
            return self.chat_id is None
        return str(chat.id) == self.chat_id

    async def command_handler(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Route any command or text to the service"""
        if update.effective_message is None or not self._authorized(update):
            return

        text = update.effective_message.text or ""
        logger.info("Command received: %s", text)
        reply = await self.service.handle_command(text)
        if reply:
            await update.effective_message.reply_text(reply, parse_mode=ParseMode.HTML)

    async def error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors"""
        logger.error("Update %s caused error %s", update, context.error)

        if isinstance(update, Update) and update.effective_message:
            await update.effective_message.reply_text("❌ An error occurred. Please try again.")

    def build_application(self) -> Application:
        application = Application.builder().token(self.token).build()

        application.add_handler(CommandHandler(list(COMMANDS), self.command_handler))
        # Unknown commands and plain text get the help text
        application.add_handler(MessageHandler(filters.TEXT, self.command_handler))
        application.add_error_handler(self.error_handler)
        return application

    async def start_async(self) -> None:
        """Start polling inside the running event loop (no threads)"""
        self.application = self.build_application()
        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling(allowed_updates=Update.ALL_TYPES)
        logger.info("✅ Telegram bot polling")

    async def stop_async(self) -> None:
        if self.application is None:
            return
        if self.application.updater and self.application.updater.running:
            await self.application.updater.stop()
        if self.application.running:
            await self.application.stop()
        await self.application.shutdown()
        self.application = None
        logger.info("✅ Telegram bot stopped")
