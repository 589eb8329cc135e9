import logging
import os
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)

# Local runs keep the roster in a SQLite file next to the backend
db_path = os.getenv("DATABASE_PATH", "./mukkadam.db")
env = os.getenv("ENV", os.getenv("RENDER", "").lower() or "dev")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    # A deployed instance writing to a throwaway SQLite file would lose the roster
    if env in ("prod", "production") or os.getenv("RENDER"):
        raise RuntimeError(
            "DATABASE_URL is not set; the roster needs a real database in production."
        )
    DATABASE_URL = f"sqlite:///{db_path}"

# Hosted Postgres URLs often use the old postgres:// scheme
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://"):]

# Comma separated list of front-end origins allowed to call the API
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

logger.info(f"Roster database driver: {DATABASE_URL.split(':', 1)[0]}")

# Sync endpoints run in a threadpool, so SQLite connections cross threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables():
    """Create the roster and slot tables. Existing rows are left alone."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Yield a session for one request."""
    with Session(engine) as session:
        yield session
