import logging

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from ..core.builder import ResponseBuilder
from ..core.decorators import check_not_blocked
from ..core.delivery import send_reply
from ..core.errors import DeliveryError
from ..core.models import ArticleReply, Sender

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "dress"


# --- COMMAND HANDLER ---
@check_not_blocked
async def dress_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    if not user or not update.effective_message:
        return

    builder: ResponseBuilder = context.bot_data["builder"]
    chat_id = update.effective_chat.id if update.effective_chat else None
    logger.debug(f"[command] from: {user.id}, chat: {chat_id}")

    reply = None
    try:
        reply = builder.build_reply(Sender.from_user(user))
        await send_reply(update, context, reply)
        return
    except DeliveryError as e:
        candidate = reply.candidate if reply else ""
        if e.expected:
            logger.warning(f"Telegram rejected reply \"{candidate}\" in chat {chat_id}: {e}")
        else:
            logger.error(f"Failed to send reply \"{candidate}\" in chat {chat_id}: {e}")
    except Exception as e:
        logger.error(f"Unexpected error while replying in chat {chat_id}: {e}", exc_info=True)

    try:
        await send_reply(update, context, ArticleReply(text=builder.build_error_text(), parse_mode=None))
    except DeliveryError as e:
        logger.warning(f"Error fallback in chat {chat_id} was not delivered either: {e}")
    except Exception as e:
        logger.error(f"Error fallback in chat {chat_id} crashed: {e}", exc_info=True)


# --- HANDLER LOADER ---
def load_handlers(application: Application):
    settings = application.bot_data.get("settings")
    command = settings.command if settings else DEFAULT_COMMAND
    application.add_handler(CommandHandler(command, dress_command))
    logger.info(f"Replying to /{command}.")
