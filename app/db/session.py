from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    CUSTOMER_DATABASE_URL: str
    ADMIN_DATABASE_URL: str
    IMS_DATABASE_URL: str
    MACHINE_DATABASE_URL: str
    QUERY_TIMEOUT_SECONDS: float = 30.0
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

settings = Settings()

def make_engine(url: str):
    connect_args = {}
    if url.startswith("postgresql"):
        # server-side cap so a runaway ledger scan dies with the request
        timeout_ms = int(settings.QUERY_TIMEOUT_SECONDS * 1000)
        connect_args["options"] = f"-c statement_timeout={timeout_ms}"
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)

def make_sessionmaker(url: str):
    return sessionmaker(autocommit=False, autoflush=False, bind=make_engine(url))

CustomerSession = make_sessionmaker(settings.CUSTOMER_DATABASE_URL)
AdminSession = make_sessionmaker(settings.ADMIN_DATABASE_URL)
ImsSession = make_sessionmaker(settings.IMS_DATABASE_URL)
MachineSession = make_sessionmaker(settings.MACHINE_DATABASE_URL)
