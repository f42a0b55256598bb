"""
Configuration management for the UBC course schedule scraper.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import model_validator
from pydantic_settings import BaseSettings

load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"

CATALOG_URL = (
    "https://courses.students.ubc.ca/cs/courseschedule"
    "?pname=subjarea&tname=subj-all-departments"
)


class Settings(BaseSettings):
    """Scraper and loader settings, read from the environment (and .env)."""

    # Scraping
    catalog_url: str = CATALOG_URL
    headless: bool = True
    user_data_dir: Optional[Path] = None  # persistent browser profile (cache, cookies)
    navigation_timeout_ms: int = 30000
    max_concurrent: int = 4

    # Snapshots
    snapshot_path: Path = DATA_DIR / "output.json"
    test_snapshot_path: Path = DATA_DIR / "output_test.json"

    # Logging
    log_level: str = "INFO"

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_database: str = "ubcscraper"

    @model_validator(mode="after")
    def assemble_db_connection(self) -> "Settings":
        if not self.database_url:
            self.database_url = "postgresql://{0}:{1}@{2}:{3}/{4}".format(
                self.postgres_user,
                self.postgres_password,
                self.postgres_host,
                self.postgres_port,
                self.postgres_database,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
