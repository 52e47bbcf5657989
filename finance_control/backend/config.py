"""
Runtime configuration for Finance Control.
Values come from the environment (optionally a .env file).
"""

import os
import sys
import logging
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DEFAULT_DATA_FILE = 'controle-financeiro.json'

# Fixed ports keep the same browser origin between runs
PREFERRED_PORTS = (3007, 3017, 3027)


def _default_data_dir():
    # Running as PyInstaller .exe: data sits next to the .exe
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    # Running from source: data sits at project root
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


STORAGE_BACKEND = os.getenv("FINANCE_STORAGE", "json").lower()
DATA_DIR = os.getenv("FINANCE_DATA_DIR") or _default_data_dir()
DATA_FILE = os.getenv("FINANCE_DATA_FILE", DEFAULT_DATA_FILE)
HOST = os.getenv("FINANCE_HOST", "127.0.0.1")
PORT = int(os.getenv("FINANCE_PORT")) if os.getenv("FINANCE_PORT") else None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SECRET_KEY = os.getenv("SECRET_KEY", "finance-control-dev")


def data_path():
    return os.path.join(DATA_DIR, DATA_FILE)


def configure_logging(level=None):
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level or LOG_LEVEL, logging.INFO)
    )
