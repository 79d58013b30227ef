from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from mall_admin.config import settings

# SQLite needs the same-thread check disabled for the threadpool FastAPI runs sync routes in
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# SQLAlchemy engine
engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,  # Check connections before use
    echo=settings.ENVIRONMENT == "development" and settings.LOG_LEVEL == "DEBUG"  # Log SQL in dev
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for the models
Base = declarative_base()


def get_db():
    """
    Dependency that yields a database session
    Used with FastAPI Depends
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create every table registered on the metadata"""
    # Import the models so they are registered on Base.metadata
    from mall_admin import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
