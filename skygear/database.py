"""
数据库句柄
Public and private record databases. Both are thin facades over record
requests; new records inherit the process-wide default access control.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

import structlog

from skygear.models import AccessControl, get_default_access_control, set_default_access_control
from skygear.persistent_store import PersistentStore
from skygear.request import (
    RecordDeleteRequest,
    RecordQueryRequest,
    RecordSaveRequest,
    ResponseHandler,
    SetDefaultAccessRequest,
)
from skygear.request_manager import RequestManager

logger = structlog.get_logger()

PUBLIC_DATABASE_ID = "_public"
PRIVATE_DATABASE_ID = "_private"


def new_record(record_type: str, **fields: Any) -> Dict[str, Any]:
    """Create a record dict with a fresh ``<type>/<uuid>`` id."""
    record = dict(fields)
    record["_id"] = f"{record_type}/{uuid.uuid4()}"
    return record


class Database:
    def __init__(self, database_id: str, request_manager: RequestManager) -> None:
        self.database_id = database_id
        self._request_manager = request_manager

    @classmethod
    def public_database(cls, request_manager: RequestManager, persistent_store: PersistentStore) -> "PublicDatabase":
        return PublicDatabase(request_manager, persistent_store)

    @classmethod
    def private_database(cls, request_manager: RequestManager) -> "Database":
        return cls(PRIVATE_DATABASE_ID, request_manager)

    @staticmethod
    def _with_default_access(record: Dict[str, Any], default: Optional[AccessControl]) -> Dict[str, Any]:
        if default is None or "_access" in record:
            return record
        return {**record, "_access": default.to_wire()}

    def save(self, records: List[Dict[str, Any]], handler: Optional[ResponseHandler] = None, atomic: bool = False):
        default = get_default_access_control()
        request = RecordSaveRequest(
            self.database_id,
            [self._with_default_access(record, default) for record in records],
            atomic=atomic,
        )
        request.response_handler = handler
        return self._request_manager.send_request(request)

    def query(
        self,
        record_type: str,
        predicate: Optional[List[Any]] = None,
        sort: Optional[List[Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        handler: Optional[ResponseHandler] = None,
    ):
        request = RecordQueryRequest(self.database_id, record_type, predicate, sort, limit, offset)
        request.response_handler = handler
        return self._request_manager.send_request(request)

    def delete(self, record_ids: List[str], handler: Optional[ResponseHandler] = None):
        request = RecordDeleteRequest(self.database_id, record_ids)
        request.response_handler = handler
        return self._request_manager.send_request(request)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.database_id!r})"


class PublicDatabase(Database):
    """The public database also manages default access control."""

    def __init__(self, request_manager: RequestManager, persistent_store: PersistentStore) -> None:
        super().__init__(PUBLIC_DATABASE_ID, request_manager)
        self._store = persistent_store

    def set_default_access_control(self, acl: Optional[AccessControl]) -> None:
        """Install ``acl`` as the process-wide default and persist it."""
        set_default_access_control(acl)
        self._store.default_access_control = acl
        self._store.save()
        logger.info("Default access control updated", public_access=acl.public_access if acl else None)

    def set_record_default_access(self, record_type: str, acl: AccessControl, handler: Optional[ResponseHandler] = None):
        """Server-side default access for ``record_type``."""
        request = SetDefaultAccessRequest(record_type, acl.to_wire())
        request.response_handler = handler
        return self._request_manager.send_request(request)
