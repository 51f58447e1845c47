from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import os
from pathlib import Path

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

class BackendSettings(BaseSettings):
    url: str = "http://localhost:54321/rest/v1"
    key: str = ""
    timeout: float = 10.0

    model_config = SettingsConfigDict(env_prefix='BACKEND_')

class RedisSettings(BaseSettings):
    url: str = "redis://localhost:6379/0"
    cache_ttl: int = 300  # Content reads are cached for five minutes

    model_config = SettingsConfigDict(env_prefix='REDIS_')

class AppSettings(BaseSettings):
    base_url: str = "https://gtmcookbook.com"
    admin_token: Optional[str] = None  # Admin routes answer 503 until this is set
    log_level: str = "INFO"
    tools_dir: str = str(Path(__file__).resolve().parent.parent / "assets" / "tools")
    rate_limit_per_minute: int = 20
    cors_origins: str = "*"  # Comma separated

    model_config = SettingsConfigDict(env_prefix='APP_')

    def cors_origin_list(self):
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

# Instantiate settings
backend_settings = BackendSettings()
redis_settings = RedisSettings()
app_settings = AppSettings()
