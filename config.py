from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Intake API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./customers.db"
    cors_origins: str = "http://localhost:5173,http://localhost:5174,http://localhost:5175"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
