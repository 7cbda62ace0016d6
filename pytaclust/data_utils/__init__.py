"""The module 'pytaclust.data_utils' provides the TAC
source used by the clustering techniques and functions
to load images and save/load the results"""

from ._data_utils import (
    TACVolume,
    Voxel,
    load_volume,
    save_results,
    load_results,
    clusters_summary,
    load_dictionary,
    save_dictionary,
)

__all__ = [
    "TACVolume",
    "Voxel",
    "load_volume",
    "save_results",
    "load_results",
    "clusters_summary",
    "load_dictionary",
    "save_dictionary"
]
