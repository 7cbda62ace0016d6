from enum import Enum

import numpy as np
from scipy.spatial.distance import cdist

from ._cluster import Cluster
from ._seeds import parse_seeds,random_seeds,format_seeds
from ..signal_tools._signal_tools import get_metric,_get_noise_filter
from ..data_utils.validation import (
    _check_isint,
    _check_isnumber,
    _check_isbool,
    _check_noise_filter,
    _check_volume
)

class KMeansState(Enum):
    """Stages of a k-means run."""
    INIT = 'init'
    ITERATE = 'iterate'
    CONVERGED = 'converged'
    MAX_ITER_REACHED = 'max_iter_reached'

class KMeansTAC():
    """
    K-Means clustering of the voxels of a
    dynamic image according to their TACs.

    Each iteration restarts the membership of
    every cluster from its centroid only, so
    clusters that end an iteration without
    voxels are discarded and the final number
    of clusters may be lower than 'k'.

    Params:
    -------
    k : int.
        Number of initial centroids.

    initial_centroids : str or None.
        Voxels to use as initial centroids, with the
        format 'x1,y1,s1;x2,y2,s2' (slices start at 1).
        If fewer than 'k' voxels are given, the rest
        are chosen at random. If the string is not
        valid, every centroid is chosen at random.

    tolerance : int or float.
        Change (in %) between the centroids of two
        consecutive iterations below which the
        algorithm stops. With a value below 0.1,
        centroids must be exactly equal.

    max_iterations : int.
        Maximum number of iterations.

    metric : str or callable.
        Distance between TACs and centroids. See
        'pytaclust.signal_tools.get_metric'.

    skip_noisy : bool.
        Whether to leave out the voxels flagged
        as noise by 'noise_filter'.

    noise_filter : None or object with 'is_noise' method.
        Used only if 'skip_noisy' is True. If None,
        a PeakNoiseFilter fitted on the volume is used.

    verbose : bool.
        Whether to print the progress.

    Attributes:
    -----------
    clusters_ : list of Cluster.
        Clusters formed in the last iteration.

    cluster_centers_ : ndarray of shape (n_clusters,n_frames).
        Centroid of each cluster.

    labels_ : ndarray of shape (size_x,size_y,n_slices).
        Cluster of each voxel (1 is the first cluster
        of 'clusters_'; 0 means not assigned).

    seeds_ : list of tuples (x, y, slice).
        Voxels used as initial centroids.

    seeds_string_ : str.
        'seeds_' in the format of 'initial_centroids'.

    n_iter_ : int.
        Number of iterations run.

    n_clusters_per_iter_ : list of int.
        Number of clusters left at the end
        of each iteration (never increases).

    state_ : KMeansState.
        CONVERGED or MAX_ITER_REACHED. A run in
        which no voxel can be assigned to any
        centroid (e.g. every distance is nan)
        stops before 'max_iterations' without
        clusters, and is also MAX_ITER_REACHED.
    """
    def __init__(self,k=5,initial_centroids=None,tolerance=0.,max_iterations=100,
                metric='euclidean',skip_noisy=False,noise_filter=None,verbose=False):
        #validation of input data
        _check_isint({
            'k':k,
            'max_iterations':max_iterations
            })
        _check_isnumber({'tolerance':tolerance})
        _check_isbool({
            'skip_noisy':skip_noisy,
            'verbose':verbose
            })
        _check_noise_filter(noise_filter)
        get_metric(metric)

        if initial_centroids is not None and not isinstance(initial_centroids,str):
            raise TypeError("'initial_centroids' must be a string or None!")
        if k<1:
            raise ValueError("'k' must be > 0")
        if max_iterations<1:
            raise ValueError("'max_iterations' must be > 0")
        if tolerance<0:
            raise ValueError("'tolerance' can't be negative")

        self._k_ = k
        self._initial_centroids_ = initial_centroids
        self._tolerance_ = tolerance
        self._max_iterations_ = max_iterations
        self._metric_ = metric
        self._skip_noisy_ = skip_noisy
        self._noise_filter_ = noise_filter
        self._verbose_ = verbose

    def fit(self,volume,random_state=None):
        """
        Compute k-means clustering.

        Params:
        --------
        volume : TACVolume or ndarray of shape
            (size_x,size_y,n_slices,n_frames).
            Image to cluster.

        random_state : int or None.
            Determines random number generation
            for centroid initialization. Use an
            int to make the randomness deterministic.

        Returns:
        --------
        self : object.
            Fitted estimator.
        """
        volume = _check_volume(volume)
        noise_filter = _get_noise_filter(self._skip_noisy_,self._noise_filter_,volume)

        _,tacs = volume.scan_order()
        if noise_filter is None:
            valid = np.ones(tacs.shape[0],dtype=bool)
        else:
            valid = np.array([not noise_filter.is_noise(tac) for tac in tacs],dtype=bool)
            if not valid.any():
                raise ValueError("Every voxel was flagged as noise: the initial "
                                "centroids can't be selected.")

        if self._verbose_:
            print("K-means clustering started")

        #Step 1. Initial centroids
        self.state_ = KMeansState.INIT
        self.seeds_ = self._initial_points(volume,noise_filter,random_state)
        self.seeds_string_ = format_seeds(self.seeds_)
        clusters = [Cluster(volume.get_tac(*seed)) for seed in self.seeds_]

        if self._verbose_:
            print("Initial points used:")
            for seed in self.seeds_:
                print(f"   * {list(seed)}")
            print("If you wish to use same initialization, use values below:")
            print(self.seeds_string_)

        #Step 2. Iterate until the centroids don't change
        self.state_ = KMeansState.ITERATE
        centroids = [c.get_centroid() for c in clusters]
        n_iter = 0
        n_clusters_per_iter = []
        converged = False
        while not converged and n_iter<self._max_iterations_:
            n_iter += 1
            if self._verbose_:
                print(f"K-Means: Iteration {n_iter}/{self._max_iterations_}, "
                      f"clusters: {len(centroids)}")

            clusters,assignments = self._iterate(centroids,tacs,valid)

            #Discard the clusters that ended the iteration without voxels
            survivors = [idx for idx,c in enumerate(clusters) if not c.is_empty()]

            #If some cluster has been removed, don't check: it won't be reliable
            if len(survivors)==len(centroids):
                converged = all(
                    _compare_tacs(clusters[idx].get_centroid(),centroids[idx],self._tolerance_)
                    for idx in survivors
                    )

            centroids = [clusters[idx].get_centroid() for idx in survivors]
            n_clusters_per_iter.append(len(centroids))
            if not centroids:
                break

        self.state_ = KMeansState.CONVERGED if converged else KMeansState.MAX_ITER_REACHED
        self.n_iter_ = n_iter
        self.n_clusters_per_iter_ = n_clusters_per_iter
        self.clusters_ = [clusters[idx] for idx in survivors]
        self.cluster_centers_ = np.vstack(centroids) if centroids else np.empty((0,volume.n_frames))
        self.labels_ = self._labels_volume(volume,assignments,survivors,len(clusters))
        self._is_fitted = True

        if self._verbose_:
            print(f"{n_iter} iterations needed. {len(self.clusters_)} clusters formed.")
            if not self.clusters_:
                print("Warning: no voxel could be assigned to any centroid.")
            elif not converged:
                print("Warning: the maximum number of iterations was reached "
                      "before convergence.")

        return self

    def fit_predict(self,volume,random_state=None):
        """
        Compute k-means clustering and return
        the cluster label of each voxel.

        Returns:
        --------
        labels : ndarray of shape (size_x,size_y,n_slices).
        """
        return self.fit(volume,random_state=random_state).labels_

    @property
    def converged_(self):
        self._check_is_fitted()
        return self.state_ is KMeansState.CONVERGED

    def _check_is_fitted(self):
        """
        Check if the k-means model had been already fitted.
        """
        if not hasattr(self,"_is_fitted"):
            raise Exception("You have to fit the model first by using the 'fit' method.")

    def transform(self,tacs,closest=False):
        """
        Computes distances between each TAC and
        each centroid.

        Params:
        --------
        tacs : ndarray of shape (n_tacs,n_frames).
            Data to transform.

        closest : bool.
            Whether to return only the distance
            to the closest centroid.

        Returns:
        --------
        distances : ndarray of shape (n_tacs,n_clusters) or (n_tacs,).
        """
        self._check_is_fitted()

        distances = cdist(np.atleast_2d(tacs),self.cluster_centers_,self._metric_)
        if not closest:
            return distances
        else:
            return distances.min(1)

    def predict(self,tacs):
        """
        Assign each TAC to its closest cluster.

        Params:
        -------
        tacs : ndarray of shape (n_tacs,n_frames).

        Returns:
        --------
        labels : ndarray of shape (n_tacs,).
            Cluster of each TAC (1 is the first
            cluster of 'clusters_').
        """
        distances = self.transform(tacs)
        distances = np.where(np.isfinite(distances),distances,np.inf)
        return np.argmin(distances,axis=1)+1

    def _initial_points(self,volume,noise_filter,random_state):
        """
        Coordinates of the initial centroids: the
        ones provided by the user (if valid), and
        random ones for the remaining slots.
        """
        seeds = parse_seeds(self._initial_centroids_,volume.dimensions)
        if seeds is None:
            if self._initial_centroids_ and self._verbose_:
                print("Warning: the provided initial centroids are not valid. "
                      "All of them will be randomly chosen.")
            seeds = []

        seeds = seeds[:self._k_]
        seeds += random_seeds(
            volume,
            self._k_-len(seeds),
            random_state=random_state,
            noise_filter=noise_filter
            )
        return seeds

    def _iterate(self,centroids,tacs,valid):
        """
        Perform an iteration of the algorithm: create
        a cluster for each centroid and add to it the
        TACs that are closest to that centroid.

        Params:
        -------
        centroids : list of ndarray.
            Centroids of the previous iteration.

        tacs : ndarray of shape (n_voxels,n_frames).
            TAC of each voxel in iteration order.

        valid : ndarray of shape (n_voxels,).
            Whether each voxel must be clustered.

        Returns:
        --------
        clusters : list of Cluster.
            One for each centroid, possibly empty.

        assignments : ndarray of shape (n_voxels,).
            Index of the cluster of each voxel
            (-1 if not assigned).
        """
        clusters = [Cluster(centroid,is_centroid=True) for centroid in centroids]
        assignments = np.full(tacs.shape[0],-1,dtype=np.int64)

        voxels = np.flatnonzero(valid)
        distances = cdist(tacs[voxels],np.vstack(centroids),self._metric_)
        distances = np.where(np.isfinite(distances),distances,np.inf)
        #the first of the closest clusters wins
        closest = np.argmin(distances,axis=1)
        reachable = np.isfinite(distances[np.arange(voxels.size),closest])

        for voxel,cluster_idx in zip(voxels[reachable],closest[reachable]):
            clusters[cluster_idx].add(tacs[voxel])
            assignments[voxel] = cluster_idx

        return clusters,assignments

    def _labels_volume(self,volume,assignments,survivors,n_clusters):
        """
        Convert the cluster index of each voxel into
        1-based labels of the surviving clusters,
        arranged with the shape of the volume.
        """
        size_x,size_y,n_slices = volume.dimensions
        remap = np.zeros(n_clusters+1,dtype=np.int32)
        remap[np.array(survivors,dtype=np.int64)] = np.arange(1,len(survivors)+1)
        #index -1 (not assigned) points to the last entry, which stays 0
        labels = remap[assignments]
        return labels.reshape(n_slices,size_x,size_y).transpose(1,2,0)

def _compare_tacs(tac1,tac2,tolerance):
    """
    Whether two TACs are equal within a
    certain tolerance.

    Params:
    -------
    tac1, tac2 : ndarray of shape (n_frames,).

    tolerance : float.
        Allowed change, in %. For every sample,
        the ratio between the smaller and the
        larger value must be >= 1 - tolerance/100.
        Below 0.1%, TACs must be exactly equal.

    Returns:
    --------
    equal : bool.
    """
    tolerance = tolerance/100
    if tolerance<0.001:
        return np.array_equal(tac1,tac2)

    threshold = 1.-tolerance
    with np.errstate(divide='ignore',invalid='ignore'):
        ratio = np.where(tac1>tac2,tac2/tac1,tac1/tac2)
    #nan ratios (0/0) don't break the comparison
    return not (np.any(ratio<0) or np.any(ratio<threshold))
