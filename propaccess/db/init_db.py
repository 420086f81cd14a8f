"""Database bootstrapping utilities."""

from sqlalchemy import func, select

from propaccess.core.constants import ADMIN_ROLE_ID, DEFAULT_ADMIN_USERNAME
from propaccess.core.logger import logger
from propaccess.db import session as db_session
from propaccess.models import User
from propaccess.models.base import Base


def init_db() -> None:
    """Create all tables and seed the default admin account on an empty user table."""
    Base.metadata.create_all(bind=db_session.engine)

    with db_session.SessionLocal() as db:
        user_count = db.scalar(select(func.count()).select_from(User))
        if user_count:
            return
        db.add(User(id=1, username=DEFAULT_ADMIN_USERNAME, role_id=ADMIN_ROLE_ID, is_active=True))
        db.commit()
        logger.info("Seeded default admin user '%s'", DEFAULT_ADMIN_USERNAME)
