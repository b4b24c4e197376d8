from functools import lru_cache

from tldr_ai.core.settings import Settings, get_settings
from tldr_ai.services.analyst import TextAnalyst


def get_settings_dependency() -> Settings:
    return get_settings()


@lru_cache(maxsize=1)
def get_analyst() -> TextAnalyst:
    # One analyst per process so the Gemini client and its connection pool are reused
    return TextAnalyst(get_settings())
