from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from insights.models import Base

_lock = threading.Lock()
_engine = None
_SessionLocal = None

DATA_DIR = Path(__file__).parent / "data"


def default_db_path() -> Path:
    """Database location from ``INSIGHTS_DB_PATH``, else ``data/insights.db`` beside the package."""
    configured = os.environ.get("INSIGHTS_DB_PATH", "").strip()
    return Path(configured) if configured else DATA_DIR / "insights.db"


def init_db(db_path: str | Path | None = None) -> None:
    global _engine, _SessionLocal
    with _lock:
        if _engine is not None:
            _engine.dispose()
        db_path = Path(db_path) if db_path is not None else default_db_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        url = f"sqlite:///{db_path}"
        _engine = create_engine(url, connect_args={"check_same_thread": False})
        Base.metadata.create_all(_engine)
        _SessionLocal = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)


def get_session() -> Session:
    with _lock:
        if _SessionLocal is None:
            raise RuntimeError("init_db() has not been called")
        factory = _SessionLocal
    return factory()  # type: ignore[misc]


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager providing a session that rolls back on error and always closes.

    Usage (MCP server, scripts, etc.)::

        with session_scope() as session:
            ...
    """
    session = get_session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def session_generator() -> Generator[Session, None, None]:
    """Generator-based session suitable for FastAPI ``Depends()``."""
    with session_scope() as session:
        yield session
