import asyncio
import logging
from logging.handlers import RotatingFileHandler
import os
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from app.core.config import BOT_TOKEN
from app.handlers import common, cv_wizard, job_wizard, wizard
from app.middlewares.fsm_timeout import FSMTimeoutMiddleware
from app.middlewares.logging import LoggingMiddleware, CustomFormatter
from app.services.draft_storage import draft_writer

def setup_logging():
    log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_file = os.getenv('LOG_FILE', 'bot.log')

    logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5, encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(CustomFormatter('%(asctime)s - %(name)s - %(levelname)s - %(user_id)s - %(message)s'))

    logging.getLogger().addHandler(file_handler)

def build_dispatcher() -> Dispatcher:
    dp = Dispatcher()

    for observer in (dp.message, dp.callback_query):
        observer.outer_middleware(LoggingMiddleware())
        observer.outer_middleware(FSMTimeoutMiddleware())

    # wizard.router последним: он ловит любой ввод в состояниях мастера
    dp.include_router(common.router)
    dp.include_router(cv_wizard.router)
    dp.include_router(job_wizard.router)
    dp.include_router(wizard.router)
    return dp

async def main():
    setup_logging()

    bot = Bot(token=BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = build_dispatcher()

    try:
        await dp.start_polling(bot)
    except Exception as e:
        logging.critical(f"Critical error starting bot: {e}", exc_info=True)
    finally:
        draft_writer.flush_all()
        await bot.session.close()

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.info("Bot stopped gracefully")
    except Exception as e:
        logging.critical(f"Unexpected error in main: {e}", exc_info=True)
