import numpy as np

from ._cluster import Cluster,cluster_score
from ..signal_tools._signal_tools import (
    smooth_tac,
    tac_peak,
    pearson_correlation,
    _get_noise_filter
)
from ..data_utils.validation import (
    _check_isint,
    _check_isnumber,
    _check_isbool,
    _check_noise_filter,
    _check_volume
)

class _ClusterArena():
    """
    Clusters being formed, addressed by index.
    The correlation threshold, peak limit
    (peak mean - peak stdev), centroid and
    member coordinates of each cluster are
    kept in lists/arrays aligned with 'clusters'.
    """
    def __init__(self,n_frames):
        self.clusters = []
        self.records = []
        self.thresholds = np.empty(0)
        self.peak_limits = np.empty(0)
        self.centroids = np.empty((0,n_frames))

    def __len__(self):
        return len(self.clusters)

    def create(self,tac,coordinates,threshold):
        c = Cluster(tac)
        self.clusters.append(c)
        self.records.append([coordinates])
        self.thresholds = np.append(self.thresholds,threshold)
        self.peak_limits = np.append(self.peak_limits,c.get_peak_mean()-c.get_peak_stdev())
        self.centroids = np.vstack([self.centroids,c.get_centroid()])

    def admit(self,idx,tac,coordinates,increment):
        c = self.clusters[idx]
        c.add(tac)
        self.records[idx].append(coordinates)
        self.thresholds[idx] *= increment
        self.peak_limits[idx] = c.get_peak_mean()-c.get_peak_stdev()
        self.centroids[idx] = c.get_centroid()

    def evict(self,idx):
        del self.clusters[idx]
        del self.records[idx]
        self.thresholds = np.delete(self.thresholds,idx)
        self.peak_limits = np.delete(self.peak_limits,idx)
        self.centroids = np.delete(self.centroids,idx,axis=0)

    def lowest_score(self):
        """Index of the first cluster with the lowest score."""
        return int(np.argmin([cluster_score(c) for c in self.clusters]))

class LeaderFollower():
    """
    Leader-follower clustering of the voxels of a
    dynamic image, using the correlation between
    TACs and the peak amplitude of the TACs.

    The number of clusters is not known in advance:
    voxels are visited once, and each voxel joins the
    cluster whose centroid has the highest correlation
    with its (smoothed) TAC, provided that the
    correlation is above the cluster's threshold and
    the voxel's peak is not below the cluster's peak
    mean minus one standard deviation. Otherwise, the
    voxel starts a new cluster. Each time a cluster
    admits a voxel, its threshold is multiplied by
    'threshold_increment'.

    Params:
    -------
    max_clusters : int.
        Maximum number of clusters to form.

    discard_smallest : bool.
        Whether to discard the cluster with the lowest
        score (peak mean x size) when 'max_clusters' is
        reached. If False, once the limit is reached the
        remaining voxels are not clustered.

    keep_clusters : int.
        Number of clusters (the ones with the highest
        score) to keep at the end.

    threshold : int or float.
        Initial correlation threshold of every cluster.

    threshold_increment : int or float.
        Factor applied to the threshold of a cluster
        each time it admits a voxel.

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
        Kept clusters, highest score first.

    cluster_centers_ : ndarray of shape (n_clusters,n_frames).
        Centroid of each kept cluster.

    thresholds_ : ndarray of shape (n_clusters,).
        Final correlation threshold of each kept cluster.

    labels_ : ndarray of shape (size_x,size_y,n_slices).
        Cluster of each voxel (1 is the first cluster
        of 'clusters_'; 0 means not assigned).

    n_formed_ : int.
        Number of clusters before keeping the
        'keep_clusters' best ones.

    n_lost_ : int.
        Number of voxels left out because
        'max_clusters' was reached.
    """
    def __init__(self,max_clusters=1000,discard_smallest=False,keep_clusters=50,
                threshold=0.3,threshold_increment=1.,skip_noisy=False,noise_filter=None,
                verbose=False):
        #validation of input data
        _check_isint({
            'max_clusters':max_clusters,
            'keep_clusters':keep_clusters
            })
        _check_isnumber({
            'threshold':threshold,
            'threshold_increment':threshold_increment
            })
        _check_isbool({
            'discard_smallest':discard_smallest,
            'skip_noisy':skip_noisy,
            'verbose':verbose
            })
        _check_noise_filter(noise_filter)

        if max_clusters<1:
            raise ValueError("'max_clusters' must be > 0")
        if keep_clusters<1:
            raise ValueError("'keep_clusters' must be > 0")
        if threshold_increment<=0:
            raise ValueError("'threshold_increment' must be > 0")

        self._max_clusters_ = max_clusters
        self._discard_smallest_ = discard_smallest
        self._keep_clusters_ = keep_clusters
        self._threshold_ = threshold
        self._threshold_increment_ = threshold_increment
        self._skip_noisy_ = skip_noisy
        self._noise_filter_ = noise_filter
        self._verbose_ = verbose

    def fit(self,volume):
        """
        Compute leader-follower clustering.

        Params:
        --------
        volume : TACVolume or ndarray of shape
            (size_x,size_y,n_slices,n_frames).
            Image to cluster.

        Returns:
        --------
        self : object.
            Fitted estimator.
        """
        volume = _check_volume(volume)
        noise_filter = _get_noise_filter(self._skip_noisy_,self._noise_filter_,volume)
        arena = _ClusterArena(volume.n_frames)
        n_lost = 0

        if self._verbose_:
            print(f"Correlation limit: {self._threshold_:f}; "
                  f"increment: {self._threshold_increment_:f}.")

        slice = 0
        for voxel in volume:
            if self._verbose_ and slice!=voxel.slice:
                print(f"Leader-follower. Slice {voxel.slice}, "
                      f"{len(arena)}/{self._max_clusters_} clusters")
            slice = voxel.slice

            if noise_filter is not None and noise_filter.is_noise(voxel.tac):
                continue

            coordinates = (voxel.x,voxel.y,voxel.slice)

            if len(arena)==0:
                arena.create(voxel.tac,coordinates,self._threshold_)

            elif len(arena)<self._max_clusters_ or self._discard_smallest_:
                if len(arena)==self._max_clusters_:
                    arena.evict(arena.lowest_score())

                cluster_idx = self._closest_cluster(voxel.tac,arena)
                if cluster_idx>=0:
                    arena.admit(cluster_idx,voxel.tac,coordinates,self._threshold_increment_)
                else:
                    arena.create(voxel.tac,coordinates,self._threshold_)

            else:
                n_lost += 1

        #Keep the clusters with the highest scores, biggest first
        n_formed = len(arena)
        order = sorted(range(n_formed),key=lambda idx: cluster_score(arena.clusters[idx]))
        kept = order[::-1][:self._keep_clusters_]

        self.clusters_ = [arena.clusters[idx] for idx in kept]
        self.cluster_centers_ = arena.centroids[kept]
        self.thresholds_ = arena.thresholds[kept]
        self.labels_ = self._labels_volume(volume,[arena.records[idx] for idx in kept])
        self.n_formed_ = n_formed
        self.n_lost_ = n_lost
        self._is_fitted = True

        if self._verbose_:
            print(f"Leader-follower finished. {n_formed} clusters created, "
                  f"{len(self.clusters_)} kept.")
            if n_lost:
                print(f"Warning: {n_lost} voxels were not clustered because "
                      "the maximum number of clusters was reached.")

        return self

    def fit_predict(self,volume):
        """
        Compute leader-follower clustering and
        return the cluster label of each voxel.

        Returns:
        --------
        labels : ndarray of shape (size_x,size_y,n_slices).
        """
        return self.fit(volume).labels_

    def _closest_cluster(self,tac,arena):
        """
        Index of the cluster that admits 'tac' with
        the highest correlation, or -1 if no cluster
        admits it.
        """
        #Smooth the TAC only to compute the correlation
        scores = pearson_correlation(smooth_tac(tac),arena.centroids)
        admits = (scores>arena.thresholds) & (tac_peak(tac)>=arena.peak_limits)
        if not admits.any():
            return -1
        return int(np.argmax(np.where(admits,scores,-np.inf)))

    def _labels_volume(self,volume,records):
        """
        Label volume from the coordinates of
        the members of each kept cluster.
        """
        labels = volume.empty_labels()
        for label,coordinates in enumerate(records,start=1):
            coordinates = np.array(coordinates)
            labels[coordinates[:,0],coordinates[:,1],coordinates[:,2]-1] = label
        return labels
