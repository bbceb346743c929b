from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PostSummary(BaseModel):
    """An existing discussion as returned by a post search backend.

    ``title`` is the post's display title, not necessarily the movie title.
    """

    id: int | UUID | str
    title: str = ""
    movie_title: str = ""
    trailer_url: str | None = None
    image_url: str | None = None
    created_at: datetime | None = None
    upvotes: int = 0


class DuplicateCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    post: PostSummary
    distance: int = Field(ge=0)


class Movie(BaseModel):
    id: int
    title: str
    overview: str | None = None
    release_date: str | None = None
    poster_path: str | None = None
    backdrop_path: str | None = None
    vote_average: float = 0.0


class Video(BaseModel):
    key: str
    site: str = ""
    type: str = ""
    name: str = ""


class MovieDetails(Movie):
    runtime: int | None = None
    genres: list[str] = []
    videos: list[Video] = []

    @property
    def trailer_url(self) -> str | None:
        """YouTube URL of the first trailer, if TMDB lists one."""
        for video in self.videos:
            if video.site == "YouTube" and video.type == "Trailer":
                return f"https://www.youtube.com/watch?v={video.key}"
        return None
