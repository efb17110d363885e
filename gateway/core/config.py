from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from addonmirror.common.config import DEFAULT_CONFIG_PATH


class Settings(BaseSettings):
    # App
    app_name: str = "Addon Mirror"
    debug: bool = False

    # Listener; PORT has no default so a missing value fails startup
    host: str = "0.0.0.0"
    port: Optional[int] = None

    # Repository configuration (YAML)
    config_path: str = DEFAULT_CONFIG_PATH

    # Comma-separated owner/name list overriding the configured repositories
    repositories: str = ""

    # Serve an empty repository (reported as degraded) if the first reload fails
    allow_empty_start: bool = False

    @property
    def repositories_list(self) -> List[str]:
        return [repo.strip() for repo in self.repositories.split(",") if repo.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
