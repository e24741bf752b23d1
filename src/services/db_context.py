from contextlib import contextmanager

from extensions import db


@contextmanager
def db_context():
    """Provide a transactional scope around a series of DB operations."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
