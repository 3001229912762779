from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Teeman Booking Backend"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 3000
    ENVIRONMENT: str = "development"
    CLIENT_URL: str = "*"
    PUBLIC_DIR: str = "public"

    # Database
    DATABASE_URL: str = "sqlite:///./bookings.db"
    DB_POOL_SIZE: int = 10

    # Sessions
    SESSION_COOKIE_NAME: str = "booking_sid"
    SESSION_MAX_AGE: int = 86400

    # Company config (branding, notification templates)
    COMPANY_CONFIG_PATH: str = "data/company_config.json"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Notifications
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

settings = Settings()
