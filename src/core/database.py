import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..exceptions import UpstreamUnavailable

logger = structlog.get_logger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live inside a single connection
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=echo
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def verify_connection(engine: Engine) -> None:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database connection failed", url=engine.url.render_as_string(hide_password=True), error=str(e))
        raise UpstreamUnavailable(f"Database unreachable: {e}") from e


def create_tables(engine: Engine) -> None:
    # Import models to register them with Base
    from ..news.models import news_article, tech_tip  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_tables(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)

