# database.py
import logging

import databases
import sqlalchemy
from fastapi import FastAPI, Request

from config import check_database_urls
from models import Base

logger = logging.getLogger(__name__)


async def open_database(app: FastAPI, url: str, sync_url: str) -> databases.Database:
    """
    Create the tables if they are missing, connect, and attach the handle to ``app``.
    """
    check_database_urls(url, sync_url)

    sync_engine = sqlalchemy.create_engine(sync_url)
    try:
        Base.metadata.create_all(sync_engine)
    finally:
        sync_engine.dispose()

    database = databases.Database(url)
    await database.connect()
    app.state.database = database
    logger.info("Connected to database %s", sync_engine.url.render_as_string(hide_password=True))
    return database


async def close_database(app: FastAPI) -> None:
    database = getattr(app.state, "database", None)
    if database is not None and database.is_connected:
        await database.disconnect()
        logger.info("Database connection closed")


def get_database(request: Request) -> databases.Database:
    """FastAPI dependency returning the application's database handle."""
    return request.app.state.database
