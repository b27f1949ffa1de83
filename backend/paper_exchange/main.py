"""ASGI entry point: ``uvicorn paper_exchange.main:app``."""

from .app import create_app
from .config import Settings
from .logging_config import setup_logging

settings = Settings.from_env()
setup_logging(settings)
app = create_app(settings)
