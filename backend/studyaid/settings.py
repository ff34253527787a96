from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Canvas REST API root, e.g. https://<school>.instructure.com/api/v1
	canvas_api_url: str = Field(default="https://canvas.instructure.com/api/v1", validation_alias="CANVAS_API_URL")
	# Optional server-side token; only used by the /api/debug connectivity check
	canvas_api_token: str | None = Field(default=None, validation_alias="CANVAS_API_TOKEN")

	# Generation API (OpenAI-compatible chat completions)
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	openai_model: str = Field(default="gpt-3.5-turbo", validation_alias="OPENAI_MODEL")
	openai_base_url: str = Field(default="https://api.openai.com/v1", validation_alias="OPENAI_BASE_URL")
	openai_temperature: float = Field(default=0.7, validation_alias="OPENAI_TEMPERATURE")

	request_timeout: float = Field(default=30, validation_alias="REQUEST_TIMEOUT")

	# Client side (CLI): where the proxy runs and where generated content is kept
	studyaid_server_url: str = Field(default="http://127.0.0.1:8000", validation_alias="STUDYAID_SERVER_URL")
	storage_dir: Path = Field(default=Path.home() / ".studyaid", validation_alias="STUDYAID_STORAGE_DIR")
	# Optional SQL storage backend for generated content
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	environment: str = Field(default="development", validation_alias="ENVIRONMENT")
	log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
