"""
Database connection and session management
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import structlog

logger = structlog.get_logger(__name__)

# Create base class for models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create database engine"""
    if database_url.startswith("sqlite"):
        # single shared connection so in-memory databases survive across threads
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=echo
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_database(engine: Engine):
    """Initialize database tables"""
    try:
        # Import all models to ensure they are registered
        from uptime_report.models import report  # noqa

        # Create all tables
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise
