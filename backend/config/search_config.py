"""
Configuration settings for the Cirec article search service.
"""

import os
from pathlib import Path

# Base directories
BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"

# Data directory - use environment variable in production, local path in development
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

# Ensure data directory exists
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Database path - support environment variable override for production
DATABASE_PATH = os.getenv("DATABASE_PATH", str(DATA_DIR / "articles.db"))


# SEARCH CONFIGURATION

SEARCH_CONFIG = {
    # Fixed number of articles per result page
    "page_size": 20,

    # Characters removed (not escaped) from user keywords before they are
    # bound into match patterns
    "stripped_characters": "&<>\"'",

    # Longest keyword accepted at the request boundary
    "max_keyword_length": 500,

    # bm25() column weights for the FTS5 table (title, content).
    # Equal weights score both columns as one field group.
    "title_weight": 1.0,
    "content_weight": 1.0,
}


# CONCURRENCY CONFIGURATION

CONCURRENCY_CONFIG = {
    # sqlite3 calls block, so the API runs them on a small thread pool
    "search_thread_pool_size": int(os.getenv("SEARCH_THREADS", "4")),
}


# LOGGING CONFIGURATION

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path("/var/log/cirec-search") if os.path.exists("/var/log/cirec-search") else BASE_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "class": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        },
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout"
        },
        "api": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "api.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "level": LOG_LEVEL
        },
        "search": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "search.log"),
            "maxBytes": 10485760,
            "backupCount": 5,
            "formatter": "json",
            "level": LOG_LEVEL
        },
        "errors": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "errors.log"),
            "maxBytes": 10485760,
            "backupCount": 5,
            "formatter": "json",
            "level": "ERROR"
        }
    },
    "loggers": {
        "api": {
            "handlers": ["console", "api", "errors"],
            "level": LOG_LEVEL,
            "propagate": False
        },
        "search": {
            "handlers": ["console", "search", "errors"],
            "level": LOG_LEVEL,
            "propagate": False
        },
        "": {  # Root logger
            "handlers": ["console", "errors"],
            "level": LOG_LEVEL
        }
    }
}


# API CONFIGURATION

API_CONFIG = {
    "host": os.getenv("API_HOST", "0.0.0.0"),
    "port": int(os.getenv("API_PORT", "8000")),
    "reload": os.getenv("RELOAD", "false").lower() == "true",
    "log_level": LOG_LEVEL.lower()
}

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]


# ENVIRONMENT

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
