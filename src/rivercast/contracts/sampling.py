"""Sampling stage contract.

Enforces the guarantee that a sampler returns at most one sample per
path point, in path order, with non-negative intensities.
"""

from rivercast.contracts.base import require


def assert_samples_ordered(samples, n_points: int) -> None:
    """Enforce sampling stage contract.

    Parameters
    ----------
    samples : list of IntensitySample
        Output of PrecipitationSampler.sample()

    n_points : int
        Number of points in the sampled path

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        len(samples) <= n_points,
        f"Sampling contract violated: {len(samples)} samples for a {n_points}-point path"
    )

    previous = -1
    for sample in samples:
        require(
            0 <= sample.path_index < n_points,
            f"Sampling contract violated: path_index {sample.path_index} out of range"
        )
        require(
            sample.path_index > previous,
            f"Sampling contract violated: path_index {sample.path_index} follows {previous}"
        )
        require(
            sample.intensity >= 0,
            f"Sampling contract violated: negative intensity at {sample.path_index}"
        )
        previous = sample.path_index
