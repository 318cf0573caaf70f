from typing import Any, Dict, Union

from tender_filing.core.exceptions import ErrorCode
from tender_filing.schemas.results import ActionResult, ErrorInfo


def action_success(data: Any = None) -> ActionResult:
    """Wrap a successful outcome."""
    return ActionResult(success=True, data=data)


def action_failure(
    code: Union[ErrorCode, str],
    message: str,
    data: Any = None,
) -> ActionResult:
    """Wrap a failed outcome with a taxonomy code.

    Args:
        code: Error code (enum member or its string value)
        message: Human-readable message for the caller
        data: Optional partial result, e.g. files ingested before a failure
    """
    code_value = code.value if isinstance(code, ErrorCode) else str(code)
    return ActionResult(
        success=False,
        data=data,
        error=ErrorInfo(code=code_value, message=message),
    )


def create_api_response(result: ActionResult) -> Dict[str, Any]:
    """Serialize an action result for FastAPI.

    Returns a dict so endpoints can declare ``response_model=dict``.
    """
    return result.model_dump(mode="json", by_alias=True)

