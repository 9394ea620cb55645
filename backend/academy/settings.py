from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.0-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	# Sampling parameters for the assessment call
	gemini_temperature: float = Field(default=0.7, validation_alias="GEMINI_TEMPERATURE")
	gemini_top_p: float = Field(default=0.95, validation_alias="GEMINI_TOP_P")
	gemini_max_output_tokens: int = Field(default=8192, validation_alias="GEMINI_MAX_OUTPUT_TOKENS")
	gemini_timeout_seconds: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT_SECONDS")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed staff user
	seed_username: str | None = Field(default=None, validation_alias="SEED_USERNAME")
	seed_password_plain: str | None = Field(default=None, validation_alias="SEED_PASSWORD")

	# Public survey form throttling (keyed by submitted name)
	survey_rate_limit_max: int = Field(default=3, validation_alias="SURVEY_RATE_LIMIT_MAX")
	survey_rate_limit_window_seconds: float = Field(default=60.0, validation_alias="SURVEY_RATE_LIMIT_WINDOW_SECONDS")

	# Shared report links
	report_token_valid_days: int = Field(default=30, validation_alias="REPORT_TOKEN_VALID_DAYS")
	# Expired tokens are kept this many days past expiry for audit; 0 keeps them forever
	report_token_retention_days: int = Field(default=365, validation_alias="REPORT_TOKEN_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
