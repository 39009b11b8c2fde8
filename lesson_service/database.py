import logging
from typing import Optional

from fastapi import Request
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from . import config

logger = logging.getLogger(__name__)


def connect(uri: str, db_name: str, timeout_ms: Optional[int] = None) -> tuple[MongoClient, Database]:
    """Open the shared client and make sure the server answers.

    Raises whatever the driver raised; callers must not start serving on failure.
    """
    client = MongoClient(
        uri,
        serverSelectionTimeoutMS=timeout_ms or config.MONGO_TIMEOUT_MS,
        tz_aware=True,
    )
    try:
        client.admin.command("ping")
    except PyMongoError:
        logger.exception("Error connecting to MongoDB")
        client.close()
        raise

    logger.info("Connected to MongoDB database %r", db_name)
    return client, client[db_name]


def ping(db: Database) -> bool:
    try:
        db.client.admin.command("ping")
    except PyMongoError:
        logger.warning("MongoDB ping failed", exc_info=True)
        return False
    return True


def get_db(request: Request) -> Database:
    # set once by the startup hook in main.py
    return request.app.state.db
