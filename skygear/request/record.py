"""Record requests for the public/private databases.

Records are plain dicts here; their serialization belongs to the server.
"""
from typing import Any, Dict, List, Optional

from skygear.errors import InvalidRequest
from skygear.request.base import Request


class RecordSaveRequest(Request):
    def __init__(self, database_id: str, records: List[Dict[str, Any]], atomic: bool = False):
        super().__init__("record:save")
        self.data["database_id"] = database_id
        self.data["records"] = [dict(record) for record in records]
        if atomic:
            self.data["atomic"] = True

    def validate(self) -> None:
        records = self.data["records"]
        if not records:
            raise InvalidRequest("No records to save")
        for record in records:
            if not record.get("_id"):
                raise InvalidRequest("Record is missing _id", details={"record": record})


class RecordQueryRequest(Request):
    def __init__(
        self,
        database_id: str,
        record_type: str,
        predicate: Optional[List[Any]] = None,
        sort: Optional[List[Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        super().__init__("record:query")
        self.data["database_id"] = database_id
        self.data["record_type"] = record_type
        if predicate:
            self.data["predicate"] = list(predicate)
        if sort:
            self.data["sort"] = list(sort)
        if limit is not None:
            self.data["limit"] = limit
        if offset is not None:
            self.data["offset"] = offset

    def validate(self) -> None:
        if not self.data["record_type"]:
            raise InvalidRequest("record_type is required")


class RecordDeleteRequest(Request):
    def __init__(self, database_id: str, record_ids: List[str]):
        super().__init__("record:delete")
        self.data["database_id"] = database_id
        self.data["ids"] = list(record_ids)

    def validate(self) -> None:
        if not self.data["ids"]:
            raise InvalidRequest("No record ids to delete")


class SetDefaultAccessRequest(Request):
    def __init__(self, record_type: str, access: List[Dict[str, Any]]):
        super().__init__("schema:default_access")
        self.data["type"] = record_type
        self.data["default_access"] = list(access)
