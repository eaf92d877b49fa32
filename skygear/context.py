"""Platform context handle."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

DEFAULT_DATA_DIR = Path.home() / ".skygear"


class AppContext:
    """Opaque handle identifying the running application.

    Only its application-scoped context and data directory are used by the
    SDK. Per-activity contexts point at their application through ``parent``.
    """

    def __init__(self, name: str = "default", data_dir: Optional[Path] = None, parent: Optional[AppContext] = None):
        self.name = name
        self.data_dir = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR / name
        self.parent = parent

    def application_context(self) -> AppContext:
        context = self
        while context.parent is not None:
            context = context.parent
        return context

    def __repr__(self) -> str:
        return f"AppContext(name={self.name!r}, data_dir={str(self.data_dir)!r})"
