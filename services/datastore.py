"""
DataStore - the only way the services touch persisted rows.

Rows come back as the typed records from schemas/, validated here at the
boundary, so services never see ORM objects or loose dicts.
"""
from contextlib import contextmanager
from typing import Any, Iterable, List, Mapping, Optional, Sequence
import logging

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import NotFoundError, StoreError
from models.students import Student
from models.attendance import AttendanceMark
from models.payments import Payment
from models.performance import ExamResult
from schemas.students import StudentRecord
from schemas.attendance import AttendanceMarkRecord
from schemas.fees import PaymentRecord
from schemas.performance import ExamResultRecord

logger = logging.getLogger(__name__)

# table name -> (ORM model, record type)
TABLES = {
    "students": (Student, StudentRecord),
    "attendance": (AttendanceMark, AttendanceMarkRecord),
    "payments": (Payment, PaymentRecord),
    "performance": (ExamResult, ExamResultRecord),
}


class Between:
    """Inclusive range criterion for select_filtered."""

    def __init__(self, low, high):
        self.low = low
        self.high = high

    def __repr__(self):
        return f"Between({self.low!r}, {self.high!r})"


class DataStore:
    """Keyed-table store contract consumed by the services.

    criteria values: a plain value means equality, a list/tuple/set means
    membership, a Between means an inclusive range, None means IS NULL.
    """

    def select_all(self, table: str) -> List[Any]:
        raise NotImplementedError

    def select_filtered(self, table: str, criteria: Mapping[str, Any]) -> List[Any]:
        raise NotImplementedError

    def get(self, table: str, key) -> Optional[Any]:
        raise NotImplementedError

    def insert(self, table: str, row: Mapping[str, Any]):
        raise NotImplementedError

    def upsert(self, table: str, rows: Iterable[Mapping[str, Any]], conflict_keys: Sequence[str]) -> int:
        raise NotImplementedError

    def update(self, table: str, key, fields: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def transaction(self):
        raise NotImplementedError


class SqlDataStore(DataStore):
    """DataStore over a SQLAlchemy session.

    Writes outside transaction() commit immediately; inside one they are
    flushed and committed together when the outermost block exits, or
    rolled back together if anything raises.
    """

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    # -----------------
    # helpers
    # -----------------
    def _table(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table '{table}'")

    @staticmethod
    def _pk(model):
        return inspect(model).primary_key[0]

    @contextmanager
    def _guard(self, action: str, table: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("%s on '%s' failed", action, table, exc_info=True)
            raise StoreError(str(e))

    def _column(self, model, name: str):
        column = getattr(model, name, None)
        if column is None:
            raise StoreError(f"Unknown column '{name}' on '{model.__tablename__}'")
        return column

    def _filter(self, query, model, criteria: Mapping[str, Any]):
        for name, value in (criteria or {}).items():
            column = self._column(model, name)
            if isinstance(value, Between):
                query = query.filter(column.between(value.low, value.high))
            elif isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)
        return query

    def _assign(self, obj, model, fields: Mapping[str, Any]):
        for name, value in fields.items():
            self._column(model, name)
            setattr(obj, name, value)

    def _write(self):
        self.db.flush()
        if self._depth == 0:
            self.db.commit()

    # -----------------
    # reads
    # -----------------
    def select_all(self, table: str) -> List[Any]:
        return self.select_filtered(table, {})

    def select_filtered(self, table: str, criteria: Mapping[str, Any]) -> List[Any]:
        model, record = self._table(table)
        with self._guard("select", table):
            query = self._filter(self.db.query(model), model, criteria)
            rows = query.order_by(self._pk(model)).all()
        return [record.model_validate(r) for r in rows]

    def get(self, table: str, key) -> Optional[Any]:
        model, record = self._table(table)
        with self._guard("get", table):
            obj = self.db.get(model, key)
        return record.model_validate(obj) if obj is not None else None

    # -----------------
    # writes
    # -----------------
    def insert(self, table: str, row: Mapping[str, Any]):
        model, _ = self._table(table)
        obj = model()
        self._assign(obj, model, row)
        with self._guard("insert", table):
            self.db.add(obj)
            self._write()
        return getattr(obj, self._pk(model).key)

    def upsert(self, table: str, rows: Iterable[Mapping[str, Any]], conflict_keys: Sequence[str]) -> int:
        model, _ = self._table(table)
        count = 0
        with self._guard("upsert", table):
            for row in rows:
                match = {k: row[k] for k in conflict_keys}
                existing = self._filter(self.db.query(model), model, match).first()
                if existing:
                    self._assign(existing, model, row)
                else:
                    obj = model()
                    self._assign(obj, model, row)
                    self.db.add(obj)
                    # later rows in the same batch must see this one
                    self.db.flush()
                count += 1
            self._write()
        return count

    def update(self, table: str, key, fields: Mapping[str, Any]) -> None:
        model, _ = self._table(table)
        with self._guard("update", table):
            obj = self.db.get(model, key)
            if obj is None:
                raise NotFoundError(f"No row {key} in '{table}'")
            self._assign(obj, model, fields)
            self._write()

    @contextmanager
    def transaction(self):
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            if self._depth == 0:
                self.db.rollback()
            raise
        self._depth -= 1
        if self._depth == 0:
            with self._guard("commit", "transaction"):
                self.db.commit()
