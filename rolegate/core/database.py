"""PostgreSQL connection and session management."""

from collections.abc import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from rolegate.core.config import settings
from rolegate.models.role import ROLE_NAMES, Role

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def seed_roles(db: Session) -> int:
    """Insert the static role rows that are missing. Returns how many were added."""
    existing = {role_id for (role_id,) in db.query(Role.id).all()}
    added = 0
    for role_id, name in ROLE_NAMES.items():
        if role_id not in existing:
            db.add(Role(id=role_id, name=name))
            added += 1
    if added:
        db.commit()
    return added
