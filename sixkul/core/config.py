# sixkul/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str
    redis_url: str = 'redis://localhost:6379/0'
    jwt_secret_key: str

    jwt_algorithm: str = 'HS256'
    access_token_expire_minutes: int = 60 * 24
    auth_cookie_name: str = 'sixkul_auth_token'

    # Initial password for accounts created by an admin
    default_password: str = '123456'
    bcrypt_rounds: int = 12

    cache_enabled: bool = True
    cache_default_ttl: int = 300

    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = ['*']

    model_config = {
        'env_file': '.env',
        'extra': 'ignore'
    }

    @property
    def cookie_secure(self) -> bool:
        return self.environment == 'production'

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith('postgresql')

settings = Settings()
