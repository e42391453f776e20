from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  model_config = SettingsConfigDict(env_file=".env", extra="ignore")

  database_url: str = "postgresql+asyncpg://tasktaco:tasktaco@db:5432/tasktaco"
  app_secret: str = "dev-secret-change-me"
  app_version: str = "v2025-10-01"
  api_docs_enabled: bool = True
  log_level: str = "INFO"

  jwt_algorithm: str = "HS256"
  jwt_issuer: str = "TaskTaco"
  jwt_audience: str = "TaskTaco"
  access_token_ttl_days: int = 7

  rate_limit_login_ip_per_minute: int = 60
  rate_limit_register_ip_per_minute: int = 20

  cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"

  upload_dir: str = "data/uploads"
  max_profile_picture_bytes: int = 5 * 1024 * 1024
  profile_picture_extensions: str = ".jpg,.jpeg,.png,.gif"

  def cors_origin_list(self) -> list[str]:
    return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

  def profile_picture_extension_set(self) -> set[str]:
    return {e.strip().lower() for e in self.profile_picture_extensions.split(",") if e.strip()}

  def is_test_db(self) -> bool:
    db_name = self.database_url.rsplit("/", 1)[-1]
    return "test" in db_name


settings = Settings()
