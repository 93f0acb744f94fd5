import asyncio
from logging import Logger

from aiogram import Bot, Dispatcher

from catalog.config import APIConfig, BotConfig
from catalog.logging_config import LoggerSetup
from catalog.products_api import ProductsApi
from telegram_bot.handlers.products import catalog_router, get_page

ALLOWED_UPDATES = ["message", "callback_query"]

logger: Logger = LoggerSetup(logger_name="catalog").get_logger()


async def main() -> None:
    if not BotConfig.TOKEN:
        logger.error("Не задан токен бота (переменная окружения token)")
        return

    if await ProductsApi().health_check():
        logger.info("API товаров доступен: %s", APIConfig.API_URL)
    else:
        logger.warning("API товаров недоступен: %s", APIConfig.API_URL)

    bot = Bot(token=BotConfig.TOKEN)
    dp = Dispatcher()
    dp.include_router(catalog_router)

    try:
        await bot.delete_webhook(drop_pending_updates=True)
        await dp.start_polling(bot, allowed_updates=ALLOWED_UPDATES)
    finally:
        get_page().close()
        await bot.session.close()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
