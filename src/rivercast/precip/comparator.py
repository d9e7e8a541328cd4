"""Precipitation Comparator.

Samples the same path at two forecast offsets concurrently and reports
the points where precipitation increased materially or is already heavy.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, List, Optional, Sequence

import pandas as pd

from rivercast.contracts import ContractViolation
from rivercast.core.types import (
    ComparisonResult,
    ComparisonSummary,
    IntensitySample,
    PrecipitationChange,
    SegmentIntensity,
)
from rivercast.precip.errors import SamplingError
from rivercast.precip.sampler import PrecipitationSampler
from rivercast.river.risk_zones import ADVISORY_PROFILE, classify_risk, radius_for

if TYPE_CHECKING:
    from rivercast.schemas import InternalConfig

__all__ = ['PrecipitationComparator', 'reference_offset_for']

logger = logging.getLogger(__name__)


def reference_offset_for(current_offset: int, default_reference: int = 6) -> int:
    """Offset to compare ``current_offset`` against.

    The present (0h) is compared with ``default_reference``; any forecast
    offset is compared with the present.
    """
    return default_reference if current_offset == 0 else 0


class PrecipitationComparator:
    """Compare precipitation along a path between two forecast offsets.

    Example usage::

        comparator = PrecipitationComparator(config)
        result = comparator.compare(path, current_offset=0, reference_offset=6)
        for change in result.changes:
            print(change.path_index, change.delta, change.risk_level)
    """

    def __init__(self, config: "InternalConfig", sampler: Optional[PrecipitationSampler] = None,
                 clock=None):
        """Initialize comparator.

        Parameters
        ----------
        config : InternalConfig
            Reads ``config.comparator``.

        sampler : PrecipitationSampler, optional
            Sampler used for both offsets. If None, creates one from config.

        clock : callable, optional
            Function returning epoch seconds (for testing). If None, uses
            `time.time`.
        """
        cfg = config.comparator
        self.sampler = sampler or PrecipitationSampler(config)
        self.delta_threshold = cfg.delta_threshold
        self.high_intensity_threshold = cfg.high_intensity_threshold
        self.default_reference = cfg.reference_offset_hours
        self.base_radius = cfg.base_radius_m
        self.profile = ADVISORY_PROFILE.with_bounds(
            cfg.advisory_radius.min_radius_m, cfg.advisory_radius.max_radius_m
        )
        self._clock = clock or time.time

    def close(self):
        """Release the sampler's HTTP resources."""
        self.sampler.close()

    def compare(self, path: Sequence[Sequence[float]], current_offset: int,
                reference_offset: Optional[int] = None, zoom: Optional[int] = None) -> ComparisonResult:
        """Sample both offsets concurrently and pair the results by index.

        Parameters
        ----------
        path : sequence of (lng, lat)
            River path in flow order.
        current_offset : int
            Forecast offset (hours) under evaluation.
        reference_offset : int, optional
            Offset to compare against; defaults to
            ``reference_offset_for(current_offset)``.
        zoom : int, optional
            Tile zoom; defaults to the sampler's.

        Returns
        -------
        ComparisonResult

        Raises
        ------
        SamplingError
            If both samplings fail. A single failed sampling is logged and
            treated as empty.
        """
        if reference_offset is None:
            reference_offset = reference_offset_for(current_offset, self.default_reference)

        logger.info("Comparing precipitation: +%dh vs +%dh", current_offset, reference_offset)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="sample") as pool:
            current_future = pool.submit(self.sampler.sample, path, current_offset, zoom)
            reference_future = pool.submit(self.sampler.sample, path, reference_offset, zoom)
            current, current_error = _outcome(current_future)
            reference, reference_error = _outcome(reference_future)

        if current_error is not None and reference_error is not None:
            raise SamplingError(
                f"Both samplings failed (+{current_offset}h: {current_error}; "
                f"+{reference_offset}h: {reference_error})"
            ) from current_error
        if current_error is not None:
            logger.error("Sampling at +%dh failed: %s", current_offset, current_error)
        if reference_error is not None:
            logger.error("Sampling at +%dh failed: %s", reference_offset, reference_error)

        frame = self._pair(current, reference)
        now = self._clock()
        changes = tuple(
            PrecipitationChange(
                path_index=int(row.path_index),
                coordinates=row.coordinates,
                reference_intensity=float(row.reference),
                current_intensity=float(row.current),
                delta=float(row.delta),
                risk_level=classify_risk(row.current),
                advisory_radius=radius_for(row.current, self.base_radius, self.profile),
                timestamp=now,
                time_offset=current_offset,
            )
            for row in frame[frame["changed"]].itertuples(index=False)
        )

        summary = self._summarize(current, len(changes))
        logger.info("Comparison +%dh vs +%dh: %d/%d points changed (max %.1f mm/h)",
                    current_offset, reference_offset, summary.affected_points,
                    summary.total_points, summary.max_intensity)

        return ComparisonResult(
            current=tuple(current),
            reference=tuple(reference),
            changes=changes,
            current_offset=current_offset,
            reference_offset=reference_offset,
            summary=summary,
        )

    def _pair(self, current: List[IntensitySample], reference: List[IntensitySample]) -> pd.DataFrame:
        """Index-wise pairing up to the shorter list, with the change mask."""
        n = min(len(current), len(reference))
        frame = pd.DataFrame({
            "path_index": [s.path_index for s in current[:n]],
            "coordinates": [s.coordinates for s in current[:n]],
            "current": pd.Series([s.intensity for s in current[:n]], dtype=float),
            "reference": pd.Series([s.intensity for s in reference[:n]], dtype=float),
        })
        frame["delta"] = frame["current"] - frame["reference"]
        frame["changed"] = (frame["delta"] > self.delta_threshold) | (
            frame["current"] > self.high_intensity_threshold
        )
        return frame

    @staticmethod
    def _summarize(current: List[IntensitySample], affected: int) -> ComparisonSummary:
        intensities = pd.Series([s.intensity for s in current], dtype=float)
        if intensities.empty:
            return ComparisonSummary(total_points=0, affected_points=affected,
                                     max_intensity=0.0, mean_intensity=0.0)
        return ComparisonSummary(
            total_points=len(intensities),
            affected_points=affected,
            max_intensity=float(intensities.max()),
            mean_intensity=float(intensities.mean()),
        )

    @staticmethod
    def segment_intensities(samples: Sequence[IntensitySample]) -> List[SegmentIntensity]:
        """Summaries for each pair of consecutive samples."""
        segments = []
        for i in range(len(samples) - 1):
            start, end = samples[i], samples[i + 1]
            segments.append(SegmentIntensity(
                segment_index=i,
                start_coordinates=start.coordinates,
                end_coordinates=end.coordinates,
                start_intensity=start.intensity,
                end_intensity=end.intensity,
                average_intensity=(start.intensity + end.intensity) / 2,
                max_intensity=max(start.intensity, end.intensity),
            ))
        return segments

    def affected_segments(self, samples: Sequence[IntensitySample],
                          min_intensity: float = 0.5) -> List[SegmentIntensity]:
        """Segments whose peak intensity reaches ``min_intensity``."""
        return [s for s in self.segment_intensities(samples) if s.max_intensity >= min_intensity]


def _outcome(future):
    """(result, None) on success, ([], error) on failure."""
    try:
        return future.result(), None
    except ContractViolation:
        raise
    except Exception as e:
        return [], e
