"""
Migration script to create the movies table

Creates the table together with its check constraints and search indexes
(PostgreSQL only):
    - movies_release_date_check: release year between 1888 and the current year
    - genres_length_check: between 1 and 5 genres

Run this script to create the table:
    python -m app.migrations.create_movies_table
"""
import logging

from sqlalchemy import inspect

from app.database import engine, Base
from app.models.indexes import create_search_indexes
from app.models.movie import Movie

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables(bind=engine) -> bool:
    """
    Create the movies table if it does not exist yet.
    Safe to run multiple times.

    Returns:
        True if the table was created, False if it already existed
    """
    if inspect(bind).has_table(Movie.__tablename__):
        logger.info(f"Table '{Movie.__tablename__}' already exists, nothing to do")
        return False

    try:
        Base.metadata.create_all(bind=bind, tables=[Movie.__table__])
    except Exception as e:
        logger.error(f"Error creating table '{Movie.__tablename__}': {e}")
        raise

    logger.info(f"✅ Table '{Movie.__tablename__}' created")
    create_search_indexes(bind)
    return True


if __name__ == "__main__":
    create_tables()
