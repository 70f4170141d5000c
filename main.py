import os
from nicegui import app, ui

from auth.login_page import register_login_page
from layout.app_shell import register_pages
from services.app_config import load_app_config
from services.logging_setup import log_ui_exception, setup_logging
from loguru import logger


# ------------------------------------------------------------------
# GLOBAL SETUP (PROCESS LIFETIME)
# ------------------------------------------------------------------

setup_logging(app_name="pricewatch", log_level=os.environ.get("LOG_LEVEL", "INFO"))
logger.info("Starting NiceGUI")
app.on_exception(log_ui_exception)

APP_CONFIG = load_app_config()
logger.info(f"[main] - config_loaded - api={APP_CONFIG.api.base_url}")


# ------------------------------------------------------------------
# UI
# ------------------------------------------------------------------

register_login_page()
register_pages()


ui.run(
	title=APP_CONFIG.ui.title,
	host=os.environ.get("HOST", "0.0.0.0"),
	port=int(os.environ.get("PORT", "8080")),
	reload=False,
	storage_secret=os.environ["NICEGUI_STORAGE_SECRET"],
)
