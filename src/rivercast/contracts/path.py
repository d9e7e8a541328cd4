"""Path geometry contract.

Enforces the guarantee that a cumulative distance table matches its path
and is usable for interpolation along the path.
"""

import numpy as np
from rivercast.contracts.base import require


def assert_distance_table(table: np.ndarray, n_points: int) -> None:
    """Enforce distance table contract.

    Called after cumulative_distances(). Verifies the table has one entry
    per path point, starts at zero and never decreases.

    Parameters
    ----------
    table : np.ndarray
        Cumulative distances in meters

    n_points : int
        Number of points in the path the table was built from

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(table, np.ndarray) and table.ndim == 1,
        f"Path contract violated: distance table is {type(table)}, expected 1-D ndarray"
    )

    if n_points < 2:
        require(
            table.size == 0,
            f"Path contract violated: {n_points}-point path must have an empty table, got {table.size}"
        )
        return

    require(
        table.size == n_points,
        f"Path contract violated: table has {table.size} entries, expected {n_points}"
    )
    require(
        table[0] == 0.0,
        f"Path contract violated: table[0] is {table[0]}, expected 0"
    )
    require(
        bool(np.all(np.diff(table) >= 0)),
        "Path contract violated: cumulative distances must be nondecreasing"
    )
