"""
持久化存储
Durable snapshot of the current user, default access control and device id,
kept as a JSON file in the application's data directory.
"""
from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError

from skygear.context import AppContext
from skygear.models import AccessControl, User

logger = structlog.get_logger()

STORE_FILENAME = "skygear_store.json"


class PersistentStore:
    """Loaded synchronously on construction; written by ``save``."""

    def __init__(self, context: AppContext) -> None:
        self.path: Path = context.application_context().data_dir / STORE_FILENAME
        self._lock = threading.RLock()

        self.current_user: Optional[User] = None
        self.default_access_control: Optional[AccessControl] = None
        self.device_id: Optional[str] = None

        self.restore()

    def _read_file(self) -> Dict[str, Any]:
        """读取存储文件，若不存在或损坏则返回空字典"""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Persistent store is not a JSON object, ignoring", path=str(self.path))
        except (OSError, ValueError) as exc:
            logger.warning("读取持久化存储失败", path=str(self.path), error=str(exc))
        return {}

    def restore(self) -> None:
        data = self._read_file()
        with self._lock:
            self.current_user = self._parse(User, data.get("current_user"))
            self.default_access_control = self._parse(AccessControl, data.get("default_access_control"))
            self.device_id = data.get("device_id") or None

        logger.debug(
            "Persistent store restored",
            has_user=self.current_user is not None,
            has_default_access_control=self.default_access_control is not None,
        )

    @staticmethod
    def _parse(model, raw):
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Discarding invalid persisted value", model=model.__name__, errors=exc.error_count())
            return None

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "current_user": self.current_user.model_dump(mode="json") if self.current_user else None,
                "default_access_control": (
                    self.default_access_control.model_dump(mode="json") if self.default_access_control else None
                ),
                "device_id": self.device_id,
            }

    def save(self) -> None:
        """Write the snapshot; the file is replaced atomically."""
        data = self.snapshot()
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".skygear_store.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    def clear(self) -> None:
        with self._lock:
            self.current_user = None
            self.default_access_control = None
            self.device_id = None
        self.save()
