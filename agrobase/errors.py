"""Error taxonomy shared by the diagnosis service, the flows and the report."""
from typing import Iterable, List


class AgrobaseError(Exception):
    retryable = False


class ValidationError(AgrobaseError, ValueError):
    """Caller supplied bad input. Fix the input before trying again."""


class ModelError(AgrobaseError):
    """The model call failed, timed out, or returned output of the wrong shape."""

    retryable = True


class ContractViolation(AgrobaseError):
    """Well-formed model output whose fields contradict each other."""

    def __init__(self, violations: Iterable[str]):
        self.violations: List[str] = list(violations)
        super().__init__("; ".join(self.violations) or "contract violated")


class RenderError(AgrobaseError):
    """The report image could not be decoded."""
