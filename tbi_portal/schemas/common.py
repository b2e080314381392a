"""Common Result Schemas — the envelope every state-changing operation returns.

Invariants:
    - success False always carries error_kind; success True never does
    - message is human-readable and safe for direct display
"""

from pydantic import BaseModel

from tbi_portal.core.errors import ErrorKind


class ActionResult(BaseModel):
    """Outcome of a state-changing operation."""
    success: bool
    message: str
    error_kind: ErrorKind | None = None
