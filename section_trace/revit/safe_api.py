# section_trace/revit/safe_api.py

from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

T = TypeVar("T")


def safe_call_ex(
    diag: Any,
    *,
    phase: str,
    callsite: str,
    fn: Callable[[], T],
    default: T,
    context: Optional[Dict[str, Any]] = None,
    policy: str = "default",  # "default" | "raise"
) -> Tuple[T, Optional[BaseException]]:
    """
    Execute a collaborator call and handle exceptions in a controlled, observable way.

    Returns (value, exception) so callers can turn the failure into a TraceError.

    policy:
      - "default": record error, return (default, exception)
      - "raise":   record error, then re-raise
    """
    try:
        return fn(), None
    except Exception as e:
        ctx = context or {}

        if diag is not None:
            diag.error(
                phase=phase,
                callsite=callsite,
                message="Exception in collaborator call",
                exc=e,
                view_id=ctx.get("view_id"),
                elem_id=ctx.get("elem_id"),
                extra=ctx,
            )

        if policy == "raise":
            raise

        return default, e
