from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Movie(BaseModel):
    """A movie document as read from the ``movies`` collection."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    average_rating: float = Field(0.0, alias="averageRating")
    overview: str | None = None
    poster: str | None = None
    genres: dict[str, bool] = Field(default_factory=dict)
    genre_list: str = Field("", alias="genreList")
    key: str = ""

    @field_validator("average_rating", mode="before")
    @classmethod
    def _missing_rating(cls, value: Any):
        return 0.0 if value is None else value

    @field_validator("genres", mode="before")
    @classmethod
    def _missing_genres(cls, value: Any):
        return {} if value is None else value

    def to_payload(self):
        return self.model_dump(by_alias=True)


class Review(BaseModel):
    """A user review stored alongside the reviewed movie key."""

    model_config = ConfigDict(frozen=True)

    review_text: str
    rating: float

    def to_payload(self):
        return self.model_dump()


class MoviePage(BaseModel):
    """
    Result of loading one page of movies.

    ``movies`` and ``reviews`` hold everything accumulated so far, including
    the entries passed in from previous pages.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    last_movie: Any = None
    more_movies_found: bool = False
    movies: tuple[Movie, ...] = ()
    reviews: tuple[Review, ...] = ()
    errors: tuple[tuple[str, str], ...] = ()

    def to_payload(self):
        return {
            "lastMovie": None if self.last_movie is None else str(self.last_movie),
            "moreMoviesFound": self.more_movies_found,
            "movies": [movie.to_payload() for movie in self.movies],
            "reviews": [review.to_payload() for review in self.reviews],
            "errors": [{"key": key, "error": message} for key, message in self.errors],
        }
