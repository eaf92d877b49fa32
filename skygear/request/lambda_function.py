"""Lambda (cloud function) call request."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

from skygear.errors import InvalidRequest
from skygear.request.base import Request, ResponseHandler

LambdaArgs = Union[Sequence[Any], Dict[str, Any]]


class LambdaRequest(Request):
    """Calls the server function ``name``; ``args`` is positional or keyword."""

    def __init__(self, name: str, args: Optional[LambdaArgs] = None) -> None:
        super().__init__(name)
        if args is not None:
            self.data["args"] = dict(args) if isinstance(args, dict) else list(args)

    def validate(self) -> None:
        args = self.data.get("args")
        if args is not None and not isinstance(args, (list, dict)):
            raise InvalidRequest("Lambda args must be a list or a dict", details={"action": self.action})


class LambdaResponseHandler(ResponseHandler):
    """Receives the lambda's ``result`` value."""

    def on_lambda_success(self, result: Any) -> None:
        pass

    def on_lambda_fail(self, error) -> None:
        pass

    def on_success(self, result: Any) -> None:
        self.on_lambda_success(result)

    def on_fail(self, error) -> None:
        self.on_lambda_fail(error)
