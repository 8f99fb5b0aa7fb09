from fastapi import Depends
from sqlalchemy.orm import Session

from database import get_db
from services.datastore import SqlDataStore


def get_store(db: Session = Depends(get_db)) -> SqlDataStore:
    return SqlDataStore(db)
