DEFAULT_POST_TITLE = "Movie Discussion"


def generate_post_title(movie_title: str | None) -> str:
    """Default display title for a new discussion about ``movie_title``."""
    if not movie_title or not movie_title.strip():
        return DEFAULT_POST_TITLE
    return f"{movie_title.strip()} - First Impressions"
