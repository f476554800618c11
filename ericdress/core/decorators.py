import logging
from functools import wraps

from telegram import Update
from telegram.ext import ContextTypes

logger = logging.getLogger(__name__)


def check_not_blocked(func):
    """Drops updates from blocked users, and from ignored chats when there is one."""
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        settings = context.bot_data.get("settings")
        if settings is None:
            return await func(update, context, *args, **kwargs)

        user = update.effective_user
        if user and user.id in settings.block_from_id:
            logger.debug(f"Ignoring update from blocked user {user.id}.")
            return

        chat = update.effective_chat
        if chat and chat.id in settings.ignore_chat_id:
            logger.debug(f"Ignoring update from ignored chat {chat.id}.")
            return

        return await func(update, context, *args, **kwargs)
    return wrapper
