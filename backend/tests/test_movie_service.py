import unittest
from unittest.mock import patch
from uuid import uuid4

from app.core.errors import ValidationError
from app.db.models import Review, UserMovie
from app.schemas.movies import MovieCreateRequest, MovieUpdateRequest
from app.services.movie_service import (
    DuplicateMovieError,
    MovieHasReviewsError,
    MovieNotFoundError,
    create_movie,
    delete_movie,
    get_movie,
    list_movies,
    movie_has_genre,
    update_movie,
)
from tests.db_utils import add_movie, add_user, make_session_factory


class TestMovieServiceHelpers(unittest.TestCase):
    def test_movie_has_genre_is_exact_membership(self) -> None:
        self.assertTrue(movie_has_genre(["Drama", "Sci-Fi"], " Drama "))
        self.assertFalse(movie_has_genre(["Drama"], "Dram"))
        self.assertFalse(movie_has_genre(None, "Drama"))


class TestMovieService(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()

    def tearDown(self) -> None:
        self.db.close()

    def test_create_movie_persists_fields(self) -> None:
        movie = create_movie(
            self.db,
            MovieCreateRequest(
                title="  Arrival ",
                year=2016,
                genre=["Sci-Fi", "Drama", "Sci-Fi"],
                director="Denis Villeneuve",
                poster_url="https://example.com/arrival.jpg",
            ),
        )
        self.assertEqual(movie.title, "Arrival")
        self.assertEqual(movie.genre, ["Sci-Fi", "Drama"])
        self.assertEqual(movie.poster_url, "https://example.com/arrival.jpg")
        self.assertEqual(get_movie(self.db, movie.id).id, movie.id)

    def test_create_duplicate_title_year_conflicts(self) -> None:
        create_movie(self.db, MovieCreateRequest(title="Arrival", year=2016))
        with self.assertRaises(DuplicateMovieError):
            create_movie(self.db, MovieCreateRequest(title="Arrival", year=2016))

    def test_same_title_different_year_is_allowed(self) -> None:
        create_movie(self.db, MovieCreateRequest(title="Dune", year=1984))
        create_movie(self.db, MovieCreateRequest(title="Dune", year=2021))
        self.assertEqual(len(list_movies(self.db, title="dune")), 2)

    def test_unique_constraint_wins_when_precheck_misses(self) -> None:
        add_movie(self.db, title="Arrival", year=2016)
        with patch("app.services.movie_service._find_by_title_year", return_value=None):
            with self.assertRaises(DuplicateMovieError):
                create_movie(self.db, MovieCreateRequest(title="Arrival", year=2016))
        # Session is usable again after the rollback
        self.assertEqual(len(list_movies(self.db)), 1)

    def test_get_missing_movie_raises(self) -> None:
        with self.assertRaises(MovieNotFoundError):
            get_movie(self.db, uuid4())

    def test_update_movie_partial(self) -> None:
        movie = add_movie(self.db, title="Arrival", year=2016, director="Someone")
        updated = update_movie(self.db, movie.id, MovieUpdateRequest(length=116))
        self.assertEqual(updated.length, 116)
        self.assertEqual(updated.director, "Someone")
        self.assertEqual(updated.title, "Arrival")

    def test_update_into_existing_title_year_conflicts(self) -> None:
        add_movie(self.db, title="Arrival", year=2016)
        other = add_movie(self.db, title="Sicario", year=2015)
        with self.assertRaises(DuplicateMovieError):
            update_movie(self.db, other.id, MovieUpdateRequest(title="Arrival", year=2016))

    def test_update_keeping_own_title_year_is_fine(self) -> None:
        movie = add_movie(self.db, title="Arrival", year=2016)
        updated = update_movie(self.db, movie.id, MovieUpdateRequest(title="Arrival", rating="PG-13"))
        self.assertEqual(updated.rating, "PG-13")

    def test_update_with_no_fields_is_rejected(self) -> None:
        movie = add_movie(self.db)
        with self.assertRaises(ValidationError) as ctx:
            update_movie(self.db, movie.id, MovieUpdateRequest())
        self.assertEqual(ctx.exception.status_code, 400)

    def test_update_missing_movie_raises(self) -> None:
        with self.assertRaises(MovieNotFoundError):
            update_movie(self.db, uuid4(), MovieUpdateRequest(length=90))

    def test_delete_movie_with_reviews_is_refused(self) -> None:
        user = add_user(self.db)
        movie = add_movie(self.db)
        self.db.add(Review(user_id=user.id, movie_id=movie.id, rating=4, message="Good"))
        self.db.commit()

        with self.assertRaises(MovieHasReviewsError) as ctx:
            delete_movie(self.db, movie.id)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(get_movie(self.db, movie.id).id, movie.id)

    def test_delete_movie_without_reviews_removes_it_and_collection_entries(self) -> None:
        user = add_user(self.db)
        movie = add_movie(self.db)
        self.db.add(UserMovie(user_id=user.id, movie_id=movie.id))
        self.db.commit()

        delete_movie(self.db, movie.id)

        with self.assertRaises(MovieNotFoundError):
            get_movie(self.db, movie.id)
        self.assertEqual(self.db.query(UserMovie).count(), 0)

    def test_delete_missing_movie_raises(self) -> None:
        with self.assertRaises(MovieNotFoundError):
            delete_movie(self.db, uuid4())

    def test_list_filters_combine_with_and(self) -> None:
        add_movie(self.db, title="Arrival", year=2016, genre=["Sci-Fi", "Drama"], director="Denis Villeneuve")
        add_movie(self.db, title="Sicario", year=2015, genre=["Crime"], director="Denis Villeneuve")
        add_movie(self.db, title="Heat", year=1995, genre=["Crime", "Drama"], director="Michael Mann")

        self.assertEqual(
            [m.title for m in list_movies(self.db, director="Denis Villeneuve")],
            ["Arrival", "Sicario"],
        )
        self.assertEqual([m.title for m in list_movies(self.db, genre="Drama")], ["Arrival", "Heat"])
        self.assertEqual([m.title for m in list_movies(self.db, genre="Crime", year=1995)], ["Heat"])
        self.assertEqual([m.title for m in list_movies(self.db, title="ARR")], ["Arrival"])
        self.assertEqual(list_movies(self.db, genre="Drama", director="Nobody"), [])

    def test_title_filter_treats_wildcards_literally(self) -> None:
        add_movie(self.db, title="Arrival", year=2016)
        self.assertEqual(list_movies(self.db, title="%"), [])
