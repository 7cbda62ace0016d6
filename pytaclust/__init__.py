"""
Clustering of Time-Activity Curves (TACs) in Python
------------------------------------------------------------------------
Documentation is available in the docstrings.

Contents
--------
pytaclust is a Python toolbox to group the voxels of a dynamic image
(e.g., a PET or fMRI 4D image) according to the shape of their
Time-Activity Curves (TACs), using either k-means or a
leader-follower technique driven by correlation.

Modules
---------
clustering              --- Cluster entity and the k-means and leader-follower techniques.
data_utils              --- TAC source of a dynamic image, and functions to load images and save results.
signal_tools            --- Utilities for TACs: smoothing, peak, correlation, distances and noise filtering.
tac_clustering          --- Class to run a clustering from user-provided parameters.
"""
__pdoc__ = {}
__pdoc__["_tac_clustering"] = True

from ._tac_clustering import TACClustering
from .clustering import KMeansTAC,LeaderFollower,Cluster
from .data_utils import TACVolume
