import logging
from typing import Sequence

from telegram import (
    InlineQuery,
    InlineQueryResultArticle,
    InlineQueryResultPhoto,
    InputTextMessageContent,
    ReplyParameters,
    Update,
)
from telegram.error import BadRequest, TelegramError, TimedOut
from telegram.ext import ContextTypes

from .errors import DeliveryError
from .models import InlineResult, PhotoReply, Reply

logger = logging.getLogger(__name__)

# Routine rejections: broken HTML in pool content, or the user moved on.
EXPECTED_FAILURES = (
    "can't parse entities",
    "query is too old",
    "query id is invalid",
)


def is_expected_failure(error: Exception) -> bool:
    if isinstance(error, TimedOut):
        return True
    message = str(error).lower()
    return any(marker in message for marker in EXPECTED_FAILURES)


def _delivery_error(error: TelegramError) -> DeliveryError:
    return DeliveryError(str(error), expected=is_expected_failure(error))


# --- PAYLOAD CONVERSION ---
def to_inline_query_result(result: InlineResult) -> InlineQueryResultArticle | InlineQueryResultPhoto:
    reply = result.reply
    if isinstance(reply, PhotoReply):
        return InlineQueryResultPhoto(
            id=result.id,
            photo_url=reply.url,
            thumbnail_url=result.thumbnail_url or reply.url,
            title=result.title,
            caption=reply.caption,
            parse_mode=reply.parse_mode,
        )

    return InlineQueryResultArticle(
        id=result.id,
        title=result.title,
        description=result.description,
        thumbnail_url=result.thumbnail_url,
        input_message_content=InputTextMessageContent(
            message_text=reply.text,
            parse_mode=reply.parse_mode,
        ),
    )


# --- SENDING ---
async def answer_inline_query(inline_query: InlineQuery, results: Sequence[InlineResult]) -> None:
    try:
        # Every query must get a fresh pick, so Telegram may not cache answers.
        await inline_query.answer([to_inline_query_result(r) for r in results], cache_time=0)
    except TelegramError as e:
        raise _delivery_error(e) from e


async def _send(context: ContextTypes.DEFAULT_TYPE, chat_id: int, reply: Reply, **kwargs) -> None:
    if isinstance(reply, PhotoReply):
        await context.bot.send_photo(
            chat_id=chat_id, photo=reply.url, caption=reply.caption, parse_mode=reply.parse_mode, **kwargs
        )
    else:
        await context.bot.send_message(chat_id=chat_id, text=reply.text, parse_mode=reply.parse_mode, **kwargs)


async def send_reply(update: Update, context: ContextTypes.DEFAULT_TYPE, reply: Reply) -> None:
    """
    Replies to the triggering message. If the original message is gone,
    the reply is sent to the chat as a new message instead.
    """
    message = update.effective_message
    chat = update.effective_chat
    if not message or not chat:
        raise DeliveryError("Update has no message or chat to reply to.")

    kwargs = {}
    if message.is_topic_message and message.message_thread_id:
        kwargs["message_thread_id"] = message.message_thread_id

    try:
        try:
            await _send(context, chat.id, reply, reply_parameters=ReplyParameters(message_id=message.message_id), **kwargs)
        except BadRequest as e:
            if "message to be replied not found" not in str(e).lower():
                raise
            logger.warning("Original message not found for reply. Sending as a new message to the chat.")
            await _send(context, chat.id, reply, **kwargs)
    except TelegramError as e:
        raise _delivery_error(e) from e
