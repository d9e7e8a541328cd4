"""`Rivercast` - flood-risk nowcasting along a traced river path.

Subpackages:
- precip: Tile addressing, colour decoding, sampling, offset comparison
- river: Path geometry, water parcel advection, risk zone rendering
- pipeline: Monitoring orchestrator
- schemas: Layered pydantic configuration
- contracts: Stage invariants
"""

__version__ = "0.1.0"
