"""Training-log export."""

from .tcx import (
    TCXEncoder,
    build_race_laps,
    create_tcx,
    format_timestamp,
)

__all__ = [
    "TCXEncoder",
    "build_race_laps",
    "create_tcx",
    "format_timestamp",
]
