from datetime import date

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, register_sqlite_functions
from app.models.movie import Movie
from app.services.movie_service import MovieService

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
event.listen(engine, "connect", register_sqlite_functions)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def movie_service(db_session):
    """MovieService bound to the in-memory test database."""
    return MovieService(TestingSessionLocal)


def make_movie(**overrides) -> Movie:
    fields = {
        "title": "The Matrix",
        "overview": "A hacker learns the truth about his reality.",
        "language": "en",
        "release_date": date(1999, 3, 31),
        "rating": 8.7,
        "poster_url": "https://img.example.com/matrix-poster.jpg",
        "backdrop_url": "https://img.example.com/matrix-backdrop.jpg",
        "genres": ["Action", "Sci-Fi"],
    }
    fields.update(overrides)
    return Movie(**fields)


@pytest.fixture
def movie_factory():
    """Build unsaved Movie records with sensible defaults."""
    return make_movie
