"""Reminder notifiers - where fired reminders end up."""

import asyncio
import logging

import telegramify_markdown
from telegram import Bot

from agenda.ports.trigger_service import ReminderPayload

logger = logging.getLogger(__name__)


def format_reminder(payload: ReminderPayload) -> str:
    """Markdown text for a fired reminder."""
    lines = [f"**Reminder: {payload.title}**"]
    if payload.subtitle:
        lines.append(payload.subtitle)
    if payload.body and payload.body != payload.subtitle:
        lines.append(payload.body)
    return "\n".join(lines)


class LogNotifier:
    """Writes fired reminders to the log. Implements ReminderNotifier protocol."""

    def notify(self, payload: ReminderPayload) -> None:
        logger.info(f"Reminder: {payload.title} - {payload.subtitle}")


class TelegramNotifier:
    """
    Sends fired reminders to Telegram chats.

    Implements ReminderNotifier protocol. Triggers fire on scheduler worker
    threads, so each delivery runs its own event loop.
    """

    def __init__(self, token: str, chat_ids: list[int], bot: Bot | None = None):
        if not token and bot is None:
            raise ValueError("TELEGRAM_BOT_TOKEN not configured. Add it to agenda.conf")
        self.bot = bot or Bot(token)
        self.chat_ids = chat_ids

    def notify(self, payload: ReminderPayload) -> None:
        if not self.chat_ids:
            logger.warning("No TELEGRAM_ALLOWED_USERS configured - reminder not sent")
            return
        asyncio.run(self._send(payload))

    async def _send(self, payload: ReminderPayload) -> None:
        text = telegramify_markdown.markdownify(format_reminder(payload))
        async with self.bot:
            for chat_id in self.chat_ids:
                try:
                    await self.bot.send_message(chat_id=chat_id, text=text, parse_mode="MarkdownV2")
                except Exception as e:
                    logger.error(f"Failed to send reminder to user {chat_id}: {e}")
