from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/nightlog"
    default_tz: str = "UTC"  # "today" for streaks is taken in this zone
    tracker_api_key: str | None = None
    tracker_create_schema: bool = True

    # Rows per category on the dashboard
    dashboard_limit: int = 7

    # Telegram bot / mini-app
    bot_token: str | None = None
    webhook_secret: str | None = None  # secret_token passed to setWebhook
    webapp_url: str = "http://localhost:8000/app/"
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_s: float = 10.0
    static_dir: str = "public"

    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
