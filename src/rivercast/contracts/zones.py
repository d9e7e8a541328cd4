"""Zone rendering contract.

Enforces the guarantee that the renderer hands consumers a well-formed
GeoJSON FeatureCollection of closed polygons, static zones first.
"""

from rivercast.contracts.base import require

REQUIRED_PROPERTIES = ("riskLevel", "radius", "intensity", "isStatic")


def assert_feature_collection(collection: dict, ring_points: int) -> None:
    """Enforce zone rendering contract.

    Parameters
    ----------
    collection : dict
        Output of RiskZoneRenderer.render_combined()

    ring_points : int
        Perimeter vertices per ring (from config); rings carry one more
        vertex to close them

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        isinstance(collection, dict) and collection.get("type") == "FeatureCollection",
        "Zone contract violated: output is not a FeatureCollection"
    )

    seen_moving = False
    for feature in collection["features"]:
        props = feature["properties"]
        for key in REQUIRED_PROPERTIES:
            require(
                key in props,
                f"Zone contract violated: feature missing property '{key}'"
            )
        require(
            "segmentIndex" in props or "parcelId" in props,
            "Zone contract violated: feature has neither segmentIndex nor parcelId"
        )
        require(
            props["radius"] > 0,
            f"Zone contract violated: non-positive radius {props['radius']}"
        )

        geometry = feature["geometry"]
        require(
            geometry["type"] == "Polygon",
            f"Zone contract violated: geometry type {geometry['type']}, expected Polygon"
        )
        ring = geometry["coordinates"][0]
        require(
            len(ring) == ring_points + 1 and tuple(ring[0]) == tuple(ring[-1]),
            f"Zone contract violated: ring has {len(ring)} vertices, expected closed ring of {ring_points + 1}"
        )

        if props["isStatic"]:
            require(
                not seen_moving,
                "Zone contract violated: static zone after a moving zone"
            )
        else:
            seen_moving = True
