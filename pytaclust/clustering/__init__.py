"""
The module 'pytaclust.clustering' provides the clustering
techniques (k-means and leader-follower) that group the
voxels of a dynamic image according to their TACs
"""

from ._cluster import Cluster,cluster_score
from ._kmeans import KMeansTAC,KMeansState
from ._leader_follower import LeaderFollower
from ._seeds import parse_seeds,random_seeds,format_seeds

__all__ = [
    "Cluster",
    "cluster_score",
    "KMeansTAC",
    "KMeansState",
    "LeaderFollower",
    "parse_seeds",
    "random_seeds",
    "format_seeds",
]
