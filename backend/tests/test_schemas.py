import unittest

from pydantic import ValidationError

from app.schemas.auth import UpdateProfileRequest
from app.schemas.collection import AddToCollectionRequest
from app.schemas.movies import MovieCreateRequest, MovieUpdateRequest
from app.schemas.reviews import ReviewBody


class TestReviewBody(unittest.TestCase):
    def test_accepts_bounds(self) -> None:
        self.assertEqual(ReviewBody(rating=1, message="ok").rating, 1)
        self.assertEqual(ReviewBody(rating=5, message="ok").rating, 5)

    def test_rejects_out_of_range_and_non_integer_ratings(self) -> None:
        for bad in (0, 6, -1, "abc", "5", 4.5, True, None):
            with self.subTest(rating=bad):
                with self.assertRaises(ValidationError):
                    ReviewBody(rating=bad, message="ok")

    def test_rejects_missing_rating(self) -> None:
        with self.assertRaises(ValidationError):
            ReviewBody.model_validate({"message": "ok"})

    def test_message_is_trimmed_and_required(self) -> None:
        self.assertEqual(ReviewBody(rating=3, message="  fine  ").message, "fine")
        for bad in ("", "   "):
            with self.subTest(message=bad):
                with self.assertRaises(ValidationError):
                    ReviewBody(rating=3, message=bad)
        with self.assertRaises(ValidationError):
            ReviewBody(rating=3, message="x" * 5001)


class TestMovieSchemas(unittest.TestCase):
    def test_year_before_1888_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            MovieCreateRequest(title="Too early", year=1887)
        self.assertEqual(MovieCreateRequest(title="Roundhay Garden Scene", year=1888).year, 1888)

    def test_title_required_and_collapsed(self) -> None:
        self.assertEqual(MovieCreateRequest(title="  Blade   Runner ", year=1982).title, "Blade Runner")
        with self.assertRaises(ValidationError):
            MovieCreateRequest(title="   ", year=1982)

    def test_negative_length_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            MovieCreateRequest(title="Heat", year=1995, length=-1)

    def test_bad_poster_url_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            MovieCreateRequest(title="Heat", year=1995, poster_url="not a url")

    def test_oversized_numbers_rejected(self) -> None:
        for field, value in (("year", 10000), ("year", 10**20), ("length", 2**31), ("length", 10**20)):
            with self.subTest(field=field, value=value):
                body = {"title": "Heat", "year": 1995, field: value}
                with self.assertRaises(ValidationError):
                    MovieCreateRequest.model_validate(body)
                with self.assertRaises(ValidationError):
                    MovieUpdateRequest.model_validate({field: value})
        self.assertEqual(MovieCreateRequest(title="Heat", year=9999, length=2**31 - 1).year, 9999)

    def test_poster_url_longer_than_column_rejected(self) -> None:
        long_url = "https://img.example.com/" + "p" * 1100
        with self.assertRaises(ValidationError):
            MovieCreateRequest(title="Heat", year=1995, poster_url=long_url)
        with self.assertRaises(ValidationError):
            MovieUpdateRequest(poster_url=long_url)

    def test_update_only_tracks_sent_fields(self) -> None:
        payload = MovieUpdateRequest.model_validate({"length": 120})
        self.assertEqual(payload.model_dump(exclude_unset=True), {"length": 120})

    def test_update_cannot_null_required_fields(self) -> None:
        for field in ("title", "year", "genre"):
            with self.subTest(field=field):
                with self.assertRaises(ValidationError):
                    MovieUpdateRequest.model_validate({field: None})


class TestCollectionAndProfileSchemas(unittest.TestCase):
    def test_status_defaults_and_rejects_unknown(self) -> None:
        payload = AddToCollectionRequest.model_validate(
            {"movie_id": "6a3c2b8e-4d1f-4b55-9a77-1d2e3f4a5b6c"}
        )
        self.assertEqual(payload.status.value, "planned_to_watch")
        with self.assertRaises(ValidationError):
            AddToCollectionRequest.model_validate(
                {"movie_id": "6a3c2b8e-4d1f-4b55-9a77-1d2e3f4a5b6c", "status": "binged"}
            )

    def test_profile_update_validation(self) -> None:
        self.assertEqual(UpdateProfileRequest(email="Ada@Example.com").email, "ada@example.com")
        with self.assertRaises(ValidationError):
            UpdateProfileRequest(name="   ")
        with self.assertRaises(ValidationError):
            UpdateProfileRequest(email="not-an-email")
