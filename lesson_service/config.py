from __future__ import annotations

import os
from typing import Dict, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv
from jproperties import Properties

load_dotenv()

_PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

DB_PROPERTIES_PATH = os.getenv("DB_PROPERTIES_PATH", os.path.join(_PROJECT_DIR, "conf", "db.properties"))
MONGODB_URI = os.getenv("MONGODB_URI")
MONGODB_DB = os.getenv("MONGODB_DB")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

IMAGES_DIR = os.getenv("IMAGES_DIR", os.path.join(_PROJECT_DIR, "lesson-images"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

PRODUCTS_COLLECTION = "Products"
ORDERS_COLLECTION = "orders"


class ConfigError(Exception):
    pass


def load_properties(path: str) -> Dict[str, str]:
    """Read a Java-style ``.properties`` file into a flat dict.

    Handles ``=``/``:`` separators, comments, escapes and line continuations.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"properties file not found: {path}")

    props = Properties()
    with open(path, "rb") as fh:
        props.load(fh, "utf-8")
    return dict(props.properties)


def _require(props: Dict[str, str], key: str) -> str:
    value = props.get(key)
    if not value:
        raise ConfigError(f"missing required property: {key}")
    return value


def build_mongo_uri(props: Dict[str, str]) -> str:
    # db.dbUrl carries the leading "@host/" part, db.params the "?..." query
    prefix = _require(props, "db.prefix")
    user = quote_plus(_require(props, "db.user"))
    pwd = quote_plus(_require(props, "db.pwd"))
    url = _require(props, "db.dbUrl")
    params = props.get("db.params", "")
    return f"{prefix}{user}:{pwd}{url}{params}"


def database_name(props: Dict[str, str]) -> str:
    return _require(props, "db.dbName")


def resolve_connection(path: Optional[str] = None) -> tuple[str, str]:
    """Return ``(uri, db_name)``.

    ``MONGODB_URI``/``MONGODB_DB`` win when both are set; otherwise the
    properties file is used.
    """
    if MONGODB_URI and MONGODB_DB:
        return MONGODB_URI, MONGODB_DB

    props = load_properties(path or DB_PROPERTIES_PATH)
    return build_mongo_uri(props), database_name(props)
