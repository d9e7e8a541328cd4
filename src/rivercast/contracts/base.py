"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
It enforces semantic invariants between monitor stages.
"""

from rivercast.contracts.failure import ContractViolation


def require(condition: bool, message: str) -> None:
    """Enforce a stage contract.

    This is called at stage boundaries to verify the preceding stage
    produced the guaranteed invariants. It is fail-fast: no recovery,
    no fallback, no silence.

    Parameters
    ----------
    condition : bool
        The invariant that must be true. If False, ContractViolation is raised.

    message : str
        Error message explaining the contract violation (for debugging).

    Raises
    ------
    ContractViolation
        If condition is False. This indicates a bug in monitor logic.

    Examples
    --------
    >>> require(len(table) == len(path), "Path contract: one distance per point")
    >>> require(fc["type"] == "FeatureCollection", "Zone contract: bad type")
    """
    if not condition:
        raise ContractViolation(message)
