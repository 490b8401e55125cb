from sqlalchemy import BigInteger, Column, Date, DateTime, DDL, Float, Integer, JSON, Text, event, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator
from app.database import Base

# Schema-level bounds, narrower than the 1-10 genres accepted by validate_movie
MIN_RELEASE_YEAR = 1888
MAX_STORED_GENRES = 5


class GenreList(TypeDecorator):
    """Ordered list of genre names: text[] on PostgreSQL, JSON elsewhere"""
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(Text))
        return dialect.type_descriptor(JSON())


class Movie(Base):
    __tablename__ = "movies"

    # SQLite only autoincrements INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    created_at = Column(
        DateTime(timezone=True).with_variant(TIMESTAMP(timezone=True, precision=0), "postgresql"),
        nullable=False,
        server_default=func.now(),
    )
    title = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    language = Column(Text, nullable=False)
    release_date = Column(Date, nullable=False)
    rating = Column(Float, nullable=False)
    poster_url = Column(Text, nullable=False)
    backdrop_url = Column(Text, nullable=False)
    genres = Column(GenreList, nullable=False)
    version = Column(Integer, nullable=False, server_default=text("1"))

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}', version={self.version})>"


# Check constraints reference now(), which SQLite rejects inside CHECK,
# so they are only installed on PostgreSQL.
event.listen(
    Movie.__table__,
    "after_create",
    DDL(
        "ALTER TABLE movies ADD CONSTRAINT movies_release_date_check "
        f"CHECK (date_part('year', release_date) BETWEEN {MIN_RELEASE_YEAR} AND date_part('year', now()))"
    ).execute_if(dialect="postgresql"),
)
event.listen(
    Movie.__table__,
    "after_create",
    DDL(
        "ALTER TABLE movies ADD CONSTRAINT genres_length_check "
        f"CHECK (array_length(genres, 1) BETWEEN 1 AND {MAX_STORED_GENRES})"
    ).execute_if(dialect="postgresql"),
)
