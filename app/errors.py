import json
from typing import Any, Dict

from pydantic import ValidationError
from pymongo.errors import OperationFailure


def error_payload(exc: Exception) -> Dict[str, Any]:
    """
    Build the JSON body returned for a failed store call.

    The exception itself is echoed back: its class name and message, plus the
    field errors for a validation failure or the server code for a MongoDB
    operation failure.
    """
    payload: Dict[str, Any] = {"name": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, ValidationError):
        payload["errors"] = json.loads(exc.json(include_url=False))
    elif isinstance(exc, OperationFailure):
        payload["code"] = exc.code
    return payload


def message_payload(message: str) -> Dict[str, str]:
    return {"message": message}
