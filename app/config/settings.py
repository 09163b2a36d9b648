from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"

    # Database settings
    PGUSER: str = "postgres"
    PGPASSWORD: str = "postgres"
    PGHOST: str = "db"
    PGPORT: str = "5432"
    PGDATABASE: str = "reflectai"

    # Full URL override (e.g. sqlite for local runs and tests)
    DATABASE_URL: str | None = None

    # URLs
    FRONTEND_URL: str = "http://localhost:3000"
    BACKEND_URL: str = "http://localhost:8000"

    # Authentication
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 30

    # OpenAI
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o"

    # Stripe
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_PUBLIC_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    STRIPE_PRICE_ID_WEEKLY: str | None = None
    STRIPE_PRICE_ID_MONTHLY: str | None = None
    STRIPE_PRICE_ID_ANNUAL: str | None = None

    # Uploads
    MAX_PHOTO_SIZE: int = 5 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow"
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}:{self.PGPORT}/{self.PGDATABASE}"

settings = Settings()
