from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DATABASE_URL: str = "sqlite:///edusync.db"
    SQL_ECHO: bool = False

    JWT_KEY: str = "dev-only-signing-key-change-me"
    JWT_ISSUER: str = "edusync"
    JWT_AUDIENCE: str = "edusync-clients"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    AZURE_STORAGE_CONNECTION_STRING: str = ""
    AZURE_BLOB_CONTAINER_NAME: str = "course-urls"

    CORS_ORIGIN: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

settings = Settings()
