"""The module 'pytaclust.signal_tools' provides functions
to prepare and compare Time-Activity Curves (TACs), and
the noise filter used to skip uninformative voxels."""

from ._signal_tools import (
    tac_peak,
    smooth_tac,
    pearson_correlation,
    get_metric,
    PeakNoiseFilter
)

__all__ = [
    "tac_peak",
    "smooth_tac",
    "pearson_correlation",
    "get_metric",
    "PeakNoiseFilter"
]
