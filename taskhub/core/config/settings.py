# (c) Copyright Datacraft, 2026
"""Application settings configuration."""
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	# Decision audit store; unset keeps decisions out of the database
	db_url: str | None = None
	log_config: Path | None = Path("/app/log_config.yaml")
	api_prefix: str = ''

	# Decision audit
	decision_log_enabled: bool = True
	log_allowed_decisions: bool = False

	# Identity of the caller, set by the upstream session layer
	user_id_header: str = "X-User-Id"

	# Concurrent fetches of authorization facts
	store_timeout_seconds: float = Field(gt=0, default=5.0)

	@computed_field
	@property
	def async_db_url(self) -> str | None:
		if self.db_url is None:
			return None
		url = str(self.db_url)
		if "postgresql+psycopg://" in url:
			return url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
		elif "postgresql://" in url:
			return url.replace("postgresql://", "postgresql+asyncpg://", 1)
		return url

	model_config = SettingsConfigDict(
		env_prefix='th_',
		env_file='.env',
		env_file_encoding='utf-8',
		extra='ignore',
	)


_settings: Settings | None = None


def get_settings() -> Settings:
	global _settings
	if _settings is None:
		_settings = Settings()
	return _settings


def reset_settings() -> None:
	"""Drop the cached settings so the next call re-reads the environment."""
	global _settings
	_settings = None
