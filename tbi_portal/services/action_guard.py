"""Operation Boundary — converts every failure of a public operation into its result envelope.

Invariants:
    - A guarded operation never raises: PortalError -> its message + kind, anything else -> internal
    - The handler's session (self.db) is rolled back before the failure result is built
    - Unexpected exceptions logged with traceback; domain failures logged without

Design Decisions:
    - Decorator over try/except in every method: operations raise typed errors internally
      and stay linear; the boundary lives in one place
    - Result class chosen per operation: ActionResult subclasses get success=False,
      the application result gets status="error"
"""

import functools
import logging

from tbi_portal.core.errors import ErrorKind, PortalError
from tbi_portal.schemas.common import ActionResult

logger = logging.getLogger(__name__)


def failure_result(result_cls: type, message: str, kind: ErrorKind):
    """Build the failure envelope for result_cls."""
    if issubclass(result_cls, ActionResult):
        return result_cls(success=False, message=message, error_kind=kind)
    return result_cls(status="error", message=message, error_kind=kind)


def reported(result_cls: type, fallback_message: str):
    """Guard an async handler method; see module docstring."""

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(self, *args, **kwargs):
            try:
                return await fn(self, *args, **kwargs)
            except PortalError as e:
                await self.db.rollback()
                logger.warning(
                    f"{fn.__name__} refused: {e.message}",
                    extra={"error_code": e.code, "error_kind": e.kind.value},
                )
                return failure_result(result_cls, e.message, e.kind)
            except Exception as e:
                await self.db.rollback()
                logger.error(f"{fn.__name__} failed: {e}", exc_info=True)
                return failure_result(result_cls, fallback_message, ErrorKind.INTERNAL)

        return wrapper

    return decorator
