import importlib
import logging
import os
import random
import traceback

from telegram import Update
from telegram.ext import Application, ApplicationBuilder, ContextTypes
from telegram.request import HTTPXRequest

from .config import VERSION, LoggingSettings, Settings, load_settings
from .core.builder import ResponseBuilder
from .core.errors import ConfigurationError
from .core.formatting import TemplateFormatter
from .core.textpool import load_content_pools

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def configure_logging(log_config: LoggingSettings) -> None:
    root = logging.getLogger()
    root.setLevel(log_config.level)

    if log_config.logfile:
        file_handler = logging.FileHandler(log_config.logfile, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)
        logger.info(f"Also logging to {log_config.logfile}.")


def build_response_builder(settings: Settings, rng: random.Random | None = None) -> ResponseBuilder:
    rng = rng or random.Random()
    pools = load_content_pools(settings.msgs, settings.config_dir)
    formatter = TemplateFormatter(pools.wraps, rng, wrap_probability=settings.wrap_probability)
    return ResponseBuilder(pools, formatter, rng)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    tb_string = "".join(traceback.format_exception(None, context.error, context.error.__traceback__))
    update_str = update.to_dict() if isinstance(update, Update) else str(update)
    logger.error(f"Exception while handling an update: {context.error}\nCausing update: {update_str}\n{tb_string}")


def discover_and_register_handlers(application: Application):
    base_path = os.path.dirname(os.path.abspath(__file__))
    modules_dir = os.path.join(base_path, "modules")

    for filename in sorted(os.listdir(modules_dir)):
        if filename.endswith(".py") and not filename.startswith("_"):
            module_name = filename[:-3]
            module = importlib.import_module(f"ericdress.modules.{module_name}")

            if hasattr(module, "load_handlers"):
                module.load_handlers(application)
                logger.info(f"Successfully loaded module: {module_name}")


def build_application(settings: Settings, builder: ResponseBuilder) -> Application:
    custom_request_settings = HTTPXRequest(connect_timeout=20.0, read_timeout=80.0, write_timeout=80.0, pool_timeout=20.0)

    application = (
        ApplicationBuilder()
        .token(settings.token)
        .request(custom_request_settings)
        .build()
    )

    application.bot_data["settings"] = settings
    application.bot_data["builder"] = builder

    application.add_error_handler(error_handler)
    discover_and_register_handlers(application)
    return application


def run(settings: Settings, application: Application) -> None:
    if settings.launch_type == "webhook":
        webhook = settings.webhook
        logger.info(f"Telegram bot is starting at {webhook.url} (listening on {webhook.listen}:{webhook.port}).")
        application.run_webhook(
            listen=webhook.listen,
            port=webhook.port,
            url_path=webhook.url_path,
            webhook_url=webhook.url,
            cert=webhook.cert_path,
            key=webhook.key_path,
            allowed_updates=Update.ALL_TYPES,
            drop_pending_updates=settings.drop_pending_updates,
        )
    else:
        logger.info("Telegram bot is starting polling...")
        application.run_polling(
            allowed_updates=Update.ALL_TYPES,
            drop_pending_updates=settings.drop_pending_updates,
        )


def main() -> None:
    logger.info(f"EricDress v{VERSION}")
    try:
        settings = load_settings()
        configure_logging(settings.log_config)
        builder = build_response_builder(settings)
    except ConfigurationError as e:
        logger.critical(f"CRITICAL: {e}")
        raise SystemExit(1)

    logger.info("Starting Telegram bot...")
    application = build_application(settings, builder)
    run(settings, application)
    logger.info("Bot shutdown process completed.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Bot stopped by user.")
    except Exception as e:
        logger.critical(f"Bot crashed unexpectedly at top level: {e}", exc_info=True)
        exit(1)
