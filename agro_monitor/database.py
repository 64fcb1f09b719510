from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./agro_monitor.db")

    sensor_poll_seconds: int = int(os.getenv("SENSOR_POLL_SECONDS", "300"))
    sensor_http_timeout: float = float(os.getenv("SENSOR_HTTP_TIMEOUT", "10"))

    gismeteo_api_key: str = os.getenv("GISMETEO_API_KEY", "")
    gismeteo_api_base: str = os.getenv("GISMETEO_API_BASE", "https://api.gismeteo.net/v2")

    cors_origins: str = os.getenv("CORS_ORIGINS", "*")
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def cors_origin_list(self):
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

settings = Settings()

def _create_engine(database_url: str):
    # Left unbound when blank; the collector reports the configuration error
    if not database_url:
        return None
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if "sqlite" in database_url else {}
    )

engine = _create_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_utc_datetime() -> datetime:
    return datetime.now(timezone.utc)
