import json
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from src.models import User, SessionSlot, Patient, Visit, Appointment
from src.services.db_context import db_context
from src.services.errors import AlreadyRegistered, PersistenceFailure
from src.services.storage.base import StorageBackend


logger = logging.getLogger("storage.sql")

MODELS = {
    "users": User,
    "patients": Patient,
    "visits": Visit,
    "appointments": Appointment,
}


class SqlBackend(StorageBackend):
    """Relational backend on top of Flask-SQLAlchemy. Needs an active app context."""

    def _model(self, table: str):
        self._check_table(table)
        return MODELS[table]

    def _query(self, table, eq=None, between=None):
        model = self._model(table)
        query = model.query
        if eq:
            query = query.filter_by(**eq)
        if between:
            field, start, end = between
            query = query.filter(getattr(model, field).between(start, end))
        return model, query

    def select(self, table, eq=None, between=None, order_by=None, descending=False):
        try:
            model, query = self._query(table, eq, between)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc())
            return [row.to_dict() for row in query.all()]
        except SQLAlchemyError as e:
            logger.exception(f"[select] Failed for table={table}, eq={eq}, between={between}: {e}")
            raise PersistenceFailure() from e

    def count(self, table, eq=None):
        try:
            _, query = self._query(table, eq)
            return query.count()
        except SQLAlchemyError as e:
            logger.exception(f"[count] Failed for table={table}, eq={eq}: {e}")
            raise PersistenceFailure() from e

    def insert(self, table, row):
        model = self._model(table)
        try:
            with db_context() as session:
                record = model(**row)
                session.add(record)
            return record.to_dict()
        except IntegrityError as e:
            if table == "users":
                # unique email lost a race with another sign-up
                logger.info(f"[insert] Duplicate user email={row.get('email')}")
                raise AlreadyRegistered() from e
            logger.exception(f"[insert] Constraint failed for table={table}, id={row.get('id')}: {e}")
            raise PersistenceFailure() from e
        except SQLAlchemyError as e:
            logger.exception(f"[insert] Failed for table={table}, id={row.get('id')}: {e}")
            raise PersistenceFailure() from e

    def update(self, table, row_id, patch, eq=None) -> Optional[dict]:
        try:
            _, query = self._query(table, dict(eq or {}, id=row_id))
            with db_context() as session:
                record = query.first()
                if record is None:
                    return None
                for field, value in patch.items():
                    setattr(record, field, value)
                session.add(record)
            return record.to_dict()
        except SQLAlchemyError as e:
            logger.exception(f"[update] Failed for table={table}, id={row_id}: {e}")
            raise PersistenceFailure() from e

    def get_slot(self, key):
        try:
            slot = db.session.get(SessionSlot, key)
            return json.loads(slot.value) if slot else None
        except SQLAlchemyError as e:
            logger.exception(f"[get_slot] Failed for key={key}: {e}")
            raise PersistenceFailure() from e

    def set_slot(self, key, value):
        try:
            with db_context() as session:
                slot = session.get(SessionSlot, key)
                if value is None:
                    if slot is not None:
                        session.delete(slot)
                    return
                if slot is None:
                    slot = SessionSlot(key=key, value=json.dumps(value))
                else:
                    slot.value = json.dumps(value)
                session.add(slot)
        except SQLAlchemyError as e:
            logger.exception(f"[set_slot] Failed for key={key}: {e}")
            raise PersistenceFailure() from e
