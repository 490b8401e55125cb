"""
Movie Service - persistence for the movies table
Every operation runs in its own bounded session (see app.database.bounded_session)
"""
import logging
from datetime import date
from typing import List, Tuple

from sqlalchemy import bindparam, delete, func, insert, select, update

from app.database import QUERY_TIMEOUT, SessionLocal, bounded_session
from app.models.expressions import contains_all, title_matches
from app.models.movie import GenreList, Movie, MIN_RELEASE_YEAR
from app.schemas.filters import Filters, Metadata, calculate_metadata
from app.utils.exceptions import EditConflictError, RecordNotFoundError
from app.utils.validator import Validator, unique

logger = logging.getLogger(__name__)

MAX_TITLE_BYTES = 500
MAX_GENRES = 10


class MovieService:
    """Service for movie persistence operations"""

    # Sort tokens accepted from clients, mapped to real columns
    SORTABLE_COLUMNS = {
        "id": Movie.id,
        "title": Movie.title,
        "release_date": Movie.release_date,
        "rating": Movie.rating,
    }
    SORT_SAFELIST = [*SORTABLE_COLUMNS, *(f"-{name}" for name in SORTABLE_COLUMNS)]

    def __init__(self, session_factory=SessionLocal, timeout: float = QUERY_TIMEOUT):
        """
        Args:
            session_factory: sessionmaker bound to the process-wide pooled engine
            timeout: statement timeout applied to each operation, in seconds
        """
        self.session_factory = session_factory
        self.timeout = timeout

    def _session(self):
        return bounded_session(self.session_factory, self.timeout)

    @staticmethod
    def _writable_fields(movie: Movie) -> dict:
        return {
            "title": movie.title,
            "overview": movie.overview,
            "language": movie.language,
            "release_date": movie.release_date,
            "rating": movie.rating,
            "poster_url": movie.poster_url,
            "backdrop_url": movie.backdrop_url,
            "genres": movie.genres,
        }

    def insert(self, movie: Movie) -> None:
        """
        Insert a new movie and fill in its server-generated fields.

        Sets `id`, `created_at` and `version` on `movie` from the same
        INSERT ... RETURNING round trip. Constraint violations propagate
        as sqlalchemy.exc.IntegrityError.
        """
        stmt = (
            insert(Movie)
            .values(**self._writable_fields(movie))
            .returning(Movie.id, Movie.created_at, Movie.version)
        )

        with self._session() as db:
            row = db.execute(stmt).one()

        movie.id, movie.created_at, movie.version = row
        logger.debug(f"Inserted movie {movie.id}")

    def get(self, id: int) -> Movie:
        """
        Fetch one movie by primary key.

        Raises:
            RecordNotFoundError: If `id` is below 1 or no row matches
        """
        if id < 1:
            raise RecordNotFoundError()

        with self._session() as db:
            movie = db.get(Movie, id)

        if movie is None:
            raise RecordNotFoundError()
        return movie

    def get_all(self, title: str, genres: List[str], filters: Filters) -> Tuple[List[Movie], Metadata]:
        """
        Search movies and page through the results.

        Args:
            title: words that must all appear in the title; "" matches everything
            genres: genres every result must carry; [] matches everything
            filters: validated paging and sorting parameters

        Returns:
            The requested page of movies and its pagination metadata. The
            total count comes from a window aggregate in the same query.
        """
        # The caller-supplied safe-list may be wider than the columns movies can sort on
        sort_column = filters.sort_column()
        if sort_column not in self.SORTABLE_COLUMNS:
            raise RuntimeError(f"unsafe sort parameter: {filters.sort!r}")
        column = self.SORTABLE_COLUMNS[sort_column]
        order = column.desc() if filters.sort_direction() == "DESC" else column.asc()

        stmt = select(func.count().over().label("total_records"), Movie)
        if title:
            stmt = stmt.where(title_matches(Movie.title, title))
        if genres:
            stmt = stmt.where(contains_all(Movie.genres, bindparam("genres", list(genres), type_=GenreList)))
        # id breaks ties so pages stay stable between requests
        stmt = stmt.order_by(order, Movie.id.asc()).limit(filters.limit()).offset(filters.offset())

        with self._session() as db:
            rows = db.execute(stmt).all()

        total_records = rows[0].total_records if rows else 0
        movies = [row.Movie for row in rows]

        return movies, calculate_metadata(total_records, filters.page, filters.page_size)

    def update(self, movie: Movie) -> None:
        """
        Write `movie` back if its version still matches the stored one.

        On success `movie.version` is advanced to the stored value.

        Raises:
            EditConflictError: If the row was changed (or deleted) since
                `movie` was read
        """
        stmt = (
            update(Movie)
            .where(Movie.id == movie.id, Movie.version == movie.version)
            .values(**self._writable_fields(movie), version=Movie.version + 1)
            .returning(Movie.version)
            .execution_options(synchronize_session=False)
        )

        with self._session() as db:
            new_version = db.execute(stmt).scalar_one_or_none()

        if new_version is None:
            logger.info(f"Edit conflict on movie {movie.id} at version {movie.version}")
            raise EditConflictError()

        movie.version = new_version

    def delete(self, id: int) -> None:
        """
        Delete one movie by primary key.

        Raises:
            RecordNotFoundError: If `id` is below 1 or no row was deleted
        """
        if id < 1:
            raise RecordNotFoundError()

        stmt = delete(Movie).where(Movie.id == id).execution_options(synchronize_session=False)

        with self._session() as db:
            deleted = db.execute(stmt).rowcount

        if deleted == 0:
            raise RecordNotFoundError()
        logger.debug(f"Deleted movie {id}")


def validate_movie(v: Validator, movie: Movie) -> None:
    """Record every field violation of `movie` on `v`"""
    v.check(bool(movie.title), "title", "must be provided")
    v.check(len((movie.title or "").encode("utf-8")) <= MAX_TITLE_BYTES, "title", "must not be more than 500 bytes long")

    release_date = movie.release_date
    v.check(release_date is not None, "release_date", "must be provided")
    v.check(release_date is not None and release_date.year >= MIN_RELEASE_YEAR, "release_date", "year must be greater than 1888")
    v.check(release_date is not None and release_date <= date.today(), "release_date", "must not be in the future")

    genres = movie.genres or []
    v.check(movie.genres is not None, "genres", "must be provided")
    v.check(len(genres) >= 1, "genres", "must contain at least 1 genre")
    v.check(len(genres) <= MAX_GENRES, "genres", "must not contain more than 10 genres")
    v.check(unique(genres), "genres", "must not contain duplicate values")
