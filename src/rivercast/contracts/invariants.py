"""Formal monitor invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

MONITOR_INVARIANTS = {
    "path": [
        "Path is an ordered sequence of (lng, lat); order is flow direction",
        "Distance table has one entry per point, table[0] == 0, nondecreasing",
        "Paths with fewer than 2 points have an empty table and no-op results",
    ],

    "sampling": [
        "At most one sample per path point, in path order",
        "Each distinct tile (zoom, x, y) is fetched at most once per call",
        "Points on failed tiles are skipped, never retried",
        "Intensities are >= 0 mm/h",
    ],

    "comparison": [
        "Samples are paired by index up to the shorter list",
        "A change exists only when delta > 0.5 or current > 1.0",
        "Both samplings failing raises SamplingError; one failing is absorbed",
    ],

    "advection": [
        "One parcel per (timestamp, segment) pair, never mutated",
        "Position = origin_distance + velocity * elapsed",
        "Parcels past the path end are inactive and pruned",
    ],

    "zones": [
        "Output is a GeoJSON FeatureCollection of closed Polygon rings",
        "Every feature carries riskLevel, radius, intensity, isStatic",
        "Static zones precede moving zones",
        "No zone is produced for intensity <= 0.2 mm/h",
    ],
}

# Which stages run every cycle
STAGE_REQUIREMENTS = {
    "path": "REQUIRED",        # Every path change rebuilds the table
    "sampling": "REQUIRED",    # Every cycle samples two offsets
    "comparison": "REQUIRED",  # Every cycle pairs samples
    "advection": "OPTIONAL",   # Only when changes were detected
    "zones": "REQUIRED",       # Every cycle renders a collection
}
