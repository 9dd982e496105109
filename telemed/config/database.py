# telemed/config/database.py

from sqlalchemy import create_engine, pool
from sqlalchemy.orm import declarative_base, sessionmaker
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    database_url: str = "sqlite:///./telemed.db"

    api_version: str = "1.0.0"
    api_title: str = "Telemedicine Appointment Booking Service"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"
    debug: bool = True
    log_level: str = "info"

    # Slot grid is a product constant, independent of appointment duration
    slot_interval_minutes: int = 30
    max_alternative_slots: int = 3
    max_appointment_minutes: int = 240

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra='ignore'
    )

settings = Settings()


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": pool.QueuePool,
        "pool_size": 20,
        "max_overflow": 40,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, echo=False, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
