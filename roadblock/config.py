from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    DATABASE_URL: str = 'sqlite:///./roadblock.db'

    SECRET_KEY: str = 'change-me-in-production'
    ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720
    REMEMBER_ME_DAYS: int = 7
    COOKIE_NAME: str = 'auth_token'
    COOKIE_SECURE: bool = False

    CLOUDINARY_CLOUD_NAME: str = ''
    CLOUDINARY_UPLOAD_PRESET: str = ''

    LOG_LEVEL: str = 'INFO'


@lru_cache
def get_settings() -> Settings:
    return Settings()
