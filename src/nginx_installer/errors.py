"""Error taxonomy for the installer."""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kind of failure, used by the CLI to pick the failure message."""
    PRECONDITION = "precondition"
    STEP = "step"


class InstallerError(Exception):
    """Base class for all installer errors."""

    kind: ErrorKind = ErrorKind.STEP


class PreconditionError(InstallerError):
    """The host is not in a state where provisioning may start."""

    kind = ErrorKind.PRECONDITION


class StepFailedError(InstallerError):
    """A provisioning step failed; the run is aborted."""

    kind = ErrorKind.STEP

    def __init__(self, step_id: str, cause: Optional[BaseException] = None, message: str = ""):
        self.step_id = step_id
        self.cause = cause
        detail = message or (str(cause) if cause else "failed")
        super().__init__(f"Step {step_id} failed: {detail}")
