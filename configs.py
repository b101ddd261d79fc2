import logging
import os

from dotenv import load_dotenv
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy

load_dotenv()

db = SQLAlchemy()
login = LoginManager()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")
    # None -> create_app falls back to a SQLite file in the instance folder
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    EXPIRY_WARNING_DAYS = int(os.getenv("EXPIRY_WARNING_DAYS", "3"))
    CURRENCY_LABEL = os.getenv("CURRENCY_LABEL", "Rs")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOGIN_DISABLED = True
    LOG_LEVEL = "WARNING"


def configure_logging(app) -> None:
    """One stream handler on the root logger, level taken from LOG_LEVEL."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(h, "_ledger_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        handler._ledger_handler = True
        root.addHandler(handler)
    root.setLevel(level)
    app.logger.setLevel(level)
