from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .config import settings


def _unicode_lower(value: str | None) -> str | None:
    return None if value is None else value.lower()


def register_sqlite_functions(target: Engine) -> None:
    """
    SQLite's built-in lower() folds ASCII only; replace it with str.lower
    so service-name filters match the in-memory aggregation.
    """
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _on_connect(dbapi_conn, connection_record):  # pyright: ignore[reportUnusedFunction]
        dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


connect_args: dict[str, object] = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)
register_sqlite_functions(engine)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass
