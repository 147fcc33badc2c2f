import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    """
    Global site configuration, loaded from environment variables (with sensible defaults).

    Attributes:
        environment (str): "production" caches the content index; anything else rescans per request.
        content_root (str): Directory holding one subdirectory per language code.
        default_locale (str): Language served when the requested one has no document.
        words_per_minute (int): Reading speed used for the reading-time estimate.
        max_file_size (int): Documents larger than this (in bytes) are skipped by the index.
        api_key (str): Key required on /revalidate; empty disables the check.
        site_title (str): Title shown in page headers.
    """
    environment: str = os.getenv("NEWSDESK_ENV", "development")
    content_root: str = os.getenv("CONTENT_ROOT", "./content/news")
    default_locale: str = os.getenv("DEFAULT_LOCALE", "en")
    words_per_minute: int = int(os.getenv("WORDS_PER_MINUTE", 200))
    max_file_size: int = int(os.getenv("MAX_FILE_SIZE", 2 * 1024 * 1024))
    api_key: str = os.getenv("API_KEY", "")
    site_title: str = os.getenv("SITE_TITLE", "Newsdesk")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

settings = Settings()
