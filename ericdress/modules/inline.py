import logging

from telegram import Update
from telegram.ext import Application, ContextTypes, InlineQueryHandler

from ..core.builder import ResponseBuilder
from ..core.decorators import check_not_blocked
from ..core.delivery import answer_inline_query
from ..core.errors import DeliveryError
from ..core.models import InlineResult, Sender

logger = logging.getLogger(__name__)


def _log_delivery_failure(error: DeliveryError, result: InlineResult | None) -> None:
    candidate = result.reply.candidate if result else ""
    if error.expected:
        logger.warning(f"Telegram rejected inline answer for \"{candidate}\": {error}")
    else:
        logger.error(f"Failed to answer inline query with \"{candidate}\": {error}")


# --- INLINE QUERY HANDLER ---
@check_not_blocked
async def inline_query_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    inline_query = update.inline_query
    if not inline_query:
        return

    builder: ResponseBuilder = context.bot_data["builder"]
    logger.debug(f"[new] from: {inline_query.from_user.id}, query: {inline_query.query}")

    result = None
    try:
        result = builder.build_inline_result(Sender.from_user(inline_query.from_user))
        await answer_inline_query(inline_query, [result])
        return
    except DeliveryError as e:
        _log_delivery_failure(e, result)
    except Exception as e:
        logger.error(f"Unexpected error while answering inline query {inline_query.id}: {e}", exc_info=True)

    try:
        await answer_inline_query(inline_query, [builder.build_error_result()])
    except DeliveryError as e:
        logger.warning(f"Error fallback for inline query {inline_query.id} was not delivered either: {e}")
    except Exception as e:
        logger.error(f"Error fallback for inline query {inline_query.id} crashed: {e}", exc_info=True)


# --- HANDLER LOADER ---
def load_handlers(application: Application):
    application.add_handler(InlineQueryHandler(inline_query_handler))
