import os
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DB_FILE = os.path.join(BASE_DIR, "db.sqlite")
DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DB_FILE}")


def make_engine(url: str):
    if url in ("sqlite://", "sqlite:///:memory:"):
        # in-memory databases only survive on a single shared connection
        return create_engine(url, echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(url, echo=False)


engine = make_engine(DATABASE_URL)


def init_db():
    # Import models so SQLModel.metadata includes them
    import expense_manager.models.workspace, expense_manager.models.member, expense_manager.models.expense, expense_manager.models.user  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: one session per request.

    Routes commit through ``handle_errors``; anything left uncommitted is
    discarded when the session closes.
    """
    with Session(engine, expire_on_commit=False) as s:
        try:
            yield s
        except Exception:
            s.rollback()
            raise
