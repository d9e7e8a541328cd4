"""Monitor contracts: fail-fast enforcement of stage invariants.

This package enforces semantic guarantees between monitor stages.
Contracts fail immediately and loudly when stages don't produce
their promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate monitor correctness
- Stages handle network and decoding edge cases
"""

from rivercast.contracts.failure import ContractViolation, FailurePolicy
from rivercast.contracts.base import require
from rivercast.contracts.path import assert_distance_table
from rivercast.contracts.sampling import assert_samples_ordered
from rivercast.contracts.zones import assert_feature_collection

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "require",
    "assert_distance_table",
    "assert_samples_ordered",
    "assert_feature_collection",
]
