from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # DB
    DATABASE_URL: str = "sqlite:///./data/knowledge_base.db"

    # JWT
    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRES_SECONDS: int = 86400

    # Upload
    UPLOAD_DIR: str = "./data/uploads"
    UPLOAD_URL_PREFIX: str = "/api/uploads"
    MAX_UPLOAD_MB: int = 10
    ALLOWED_IMAGE_EXT: str = "jpg,jpeg,png,gif,webp,svg,bmp"

    # Default admin
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "Admin#123456"
    ADMIN_EMAIL: str = "admin@example.com"

    # Logging
    LOG_DIR: str = "./data/logs"
    LOG_LEVEL: str = "INFO"
    LOG_RETENTION_DAYS: int = 14

    # App
    APP_NAME: str = "Knowledge Base"
    APP_ENV: str = "production"
    ALLOW_ORIGINS: str = "http://localhost:3000"


settings = Settings()
