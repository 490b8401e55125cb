"""
Search Indexes
==============
Creates the indexes behind movie search (PostgreSQL only).

Usage:
    python -m app.models.indexes
    python -m app.models.indexes --drop

This module creates indexes to optimize:
- Full-text title matching (to_tsvector('simple', title))
- Genre containment filters (genres @> ...)

Run this after the movies table has been created.
"""
from sqlalchemy import text, inspect
from app.database import engine
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEARCH_INDEXES = [
    {
        "name": "movies_title_idx",
        "table": "movies",
        "sql": "CREATE INDEX IF NOT EXISTS movies_title_idx ON movies USING GIN (to_tsvector('simple', title));",
        "purpose": "Full-text search on titles"
    },
    {
        "name": "movies_genres_idx",
        "table": "movies",
        "sql": "CREATE INDEX IF NOT EXISTS movies_genres_idx ON movies USING GIN (genres);",
        "purpose": "Filter movies by genre"
    },
]


def index_exists(bind, table_name: str, index_name: str) -> bool:
    """Check if an index already exists"""
    indexes = inspect(bind).get_indexes(table_name)
    return any(idx['name'] == index_name for idx in indexes)


def create_search_indexes(bind=engine) -> dict:
    """
    Create the search indexes.
    This function is idempotent - safe to run multiple times.
    """
    if bind.dialect.name != "postgresql":
        logger.info(f"Skipping search indexes: not supported on {bind.dialect.name}")
        return {"created": 0, "skipped": len(SEARCH_INDEXES), "errors": 0, "total": len(SEARCH_INDEXES)}

    created_count = 0
    skipped_count = 0
    error_count = 0

    # Each index gets its own transaction so one failure does not undo the rest
    for idx in SEARCH_INDEXES:
        with bind.connect() as conn:
            try:
                if index_exists(bind, idx['table'], idx['name']):
                    logger.info(f"✓ Index {idx['name']} already exists - {idx['purpose']}")
                    skipped_count += 1
                else:
                    conn.execute(text(idx['sql']))
                    conn.commit()
                    logger.info(f"✓ Created index {idx['name']} - {idx['purpose']}")
                    created_count += 1

            except Exception as e:
                conn.rollback()
                error_msg = str(e).split('\n')[0]
                logger.error(f"✗ Error creating index {idx['name']}: {error_msg}")
                error_count += 1

    if error_count == 0:
        logger.info("✅ Search indexes ready")
    else:
        logger.warning(f"⚠️ Completed with {error_count} errors")

    return {
        "created": created_count,
        "skipped": skipped_count,
        "errors": error_count,
        "total": len(SEARCH_INDEXES)
    }


def drop_search_indexes(bind=engine) -> None:
    """Drop the search indexes (for testing/debugging)."""
    logger.warning("⚠️ Dropping search indexes...")

    with bind.connect() as conn:
        for idx in SEARCH_INDEXES:
            conn.execute(text(f"DROP INDEX IF EXISTS {idx['name']};"))
            logger.info(f"✓ Dropped index {idx['name']}")
        conn.commit()


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage movie search indexes")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop the search indexes instead of creating them"
    )

    args = parser.parse_args()

    if args.drop:
        drop_search_indexes()
    else:
        create_search_indexes()
