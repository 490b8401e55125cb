from datetime import date, timedelta

import pytest

from app.services.movie_service import validate_movie
from app.utils.validator import Validator, permitted_value, unique


def errors_for(movie) -> dict:
    v = Validator()
    validate_movie(v, movie)
    return v.errors


class TestValidator:

    def test_new_validator_is_valid(self):
        assert Validator().valid()

    def test_first_message_per_field_wins(self):
        v = Validator()
        v.add_error("title", "must be provided")
        v.add_error("title", "must not be more than 500 bytes long")

        assert not v.valid()
        assert v.errors == {"title": "must be provided"}

    def test_check_records_only_failures(self):
        v = Validator()
        v.check(True, "page", "must be greater than zero")
        v.check(False, "sort", "invalid sort value")

        assert v.errors == {"sort": "invalid sort value"}

    def test_permitted_value(self):
        assert permitted_value("id", "id", "-id")
        assert not permitted_value("rating", "id", "-id")
        assert not permitted_value("id")

    def test_unique(self):
        assert unique(["Action", "Drama"])
        assert unique([])
        assert not unique(["Action", "Drama", "Action"])


class TestValidateMovie:

    def test_valid_movie(self, movie_factory):
        assert errors_for(movie_factory()) == {}

    def test_release_today_is_allowed(self, movie_factory):
        assert errors_for(movie_factory(release_date=date.today())) == {}

    def test_missing_title(self, movie_factory):
        assert errors_for(movie_factory(title="")) == {"title": "must be provided"}
        assert errors_for(movie_factory(title=None)) == {"title": "must be provided"}

    def test_title_length_is_measured_in_bytes(self, movie_factory):
        assert errors_for(movie_factory(title="a" * 500)) == {}
        # 251 two-byte characters
        assert errors_for(movie_factory(title="é" * 251)) == {"title": "must not be more than 500 bytes long"}

    def test_missing_release_date(self, movie_factory):
        assert errors_for(movie_factory(release_date=None)) == {"release_date": "must be provided"}

    def test_release_year_before_1888(self, movie_factory):
        assert errors_for(movie_factory(release_date=date(1887, 12, 31))) == {
            "release_date": "year must be greater than 1888"
        }
        assert errors_for(movie_factory(release_date=date(1888, 1, 1))) == {}

    def test_release_in_the_future(self, movie_factory):
        tomorrow = date.today() + timedelta(days=1)
        assert errors_for(movie_factory(release_date=tomorrow)) == {"release_date": "must not be in the future"}

    @pytest.mark.parametrize("genres, message", [
        (None, "must be provided"),
        ([], "must contain at least 1 genre"),
        ([f"Genre {i}" for i in range(11)], "must not contain more than 10 genres"),
        (["Action", "Drama", "Action"], "must not contain duplicate values"),
    ])
    def test_genre_rules(self, movie_factory, genres, message):
        assert errors_for(movie_factory(genres=genres)) == {"genres": message}

    def test_ten_genres_pass_validation(self, movie_factory):
        assert errors_for(movie_factory(genres=[f"Genre {i}" for i in range(10)])) == {}

    def test_every_field_is_reported(self, movie_factory):
        movie = movie_factory(title="", release_date=None, genres=[])

        assert errors_for(movie) == {
            "title": "must be provided",
            "release_date": "must be provided",
            "genres": "must contain at least 1 genre",
        }
