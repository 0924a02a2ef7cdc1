# backend/servicedesk/core/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.engine import make_url

from .config import DATABASE_URL, dotenv_path

DSN = DATABASE_URL
if not DSN or not DSN.strip():
    raise RuntimeError(f"MSSQL_DSN / DATABASE_URL is not set. .env: {dotenv_path or '(not found)'}")

url = make_url(DSN)
engine_kwargs = dict(pool_pre_ping=True)

# Dialect specific settings
backend = url.get_backend_name()  # e.g. 'sqlite', 'mssql', 'postgresql'
if backend.startswith("sqlite"):
    # no thread check, no pool sizing arguments
    engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 15}
elif backend.startswith("mssql"):
    engine_kwargs.update(pool_size=5, max_overflow=10, fast_executemany=True)

engine = create_engine(DSN, **engine_kwargs)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
