"""Centralized failure policy for contract violations.

Contracts fail fast, loud, and once. All violations raise the same
exception type, allowing callers to handle monitor bugs uniformly.
"""

from enum import Enum


class FailurePolicy(str, Enum):
    """Failure policy for contract violations.

    FAIL_FAST (default): Raise immediately on contract violation

    SKIP_CYCLE: Log the violation, keep the previous output and wait for
    the next scheduled cycle. Used by the monitor loop so a single bad
    cycle does not stop the scheduler thread.
    """
    FAIL_FAST = "fail_fast"
    SKIP_CYCLE = "skip_cycle"


class ContractViolation(RuntimeError):
    """Raised when a stage contract is violated.

    This indicates a bug in monitor logic, not bad user input or a
    recoverable network issue. It means a stage did not produce the
    invariants it promised.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Monitor bug (programmer error)
    - TileError: Recoverable fetch/decode issues (handled per point)
    """
    pass
