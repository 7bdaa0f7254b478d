import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./data/eggs.db"
    )
    database_echo: bool = os.getenv("DATABASE_ECHO", "False").lower() == "true"

    # Auth Settings
    jwt_secret: str = os.getenv("JWT_SECRET", "")
    jwt_lifetime_seconds: int = int(os.getenv("JWT_LIFETIME_SECONDS", str(7 * 24 * 3600)))
    default_role: str = os.getenv("DEFAULT_ROLE", "vendedor")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir: str = os.getenv("LOG_DIR", "")

    cors_origins: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]
    port: int = int(os.getenv("PORT", "3000"))


settings = Settings()
