"""
Result normalization for the consuming layer.

Every dashboard call ends up as a ``DashboardResult``: success with plain data, or
failure with a readable message and no partial data.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from ..exceptions import (
    ApplicationNotFoundError,
    DatamartUnavailableError,
    InvalidApplicationKeyError,
)
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DashboardResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: int = 200
    synthetic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        result = {"success": True, "data": self.data}
        if self.synthetic:
            result["synthetic"] = True
        return result


def to_payload(value: Any) -> Any:
    """Convert derived records into plain JSON-ready values."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value


def success(value: Any) -> DashboardResult:
    return DashboardResult(
        success=True,
        data=to_payload(value),
        synthetic=getattr(value, "synthetic", False) is True,
    )


def failure(message: str, status_code: int = 500) -> DashboardResult:
    return DashboardResult(success=False, error=message, status_code=status_code)


def collect(operation: Callable[..., Any], *args, **kwargs) -> DashboardResult:
    """Run a dashboard operation and normalize its outcome."""
    try:
        value = operation(*args, **kwargs)
    except ApplicationNotFoundError:
        return failure("Application not found", status_code=404)
    except InvalidApplicationKeyError as e:
        return failure(str(e), status_code=400)
    except DatamartUnavailableError as e:
        return failure(str(e), status_code=500)
    except Exception as e:
        logger.exception(f"Dashboard operation {getattr(operation, '__name__', operation)} failed")
        return failure(f"Internal error: {e}", status_code=500)
    return success(value)
