import numpy as np

class Cluster():
    """
    Group of voxels with similar TACs.

    Keeps the running mean TAC (centroid) of its
    members, the number of members, and the mean
    and standard deviation of the members' peak
    amplitudes. Every statistic is updated
    incrementally: members are not stored.

    Params:
    -------
    seed : array-like of shape (n_frames,).
        TAC of the first member or, if
        'is_centroid' is True, a bare centroid
        (the cluster starts with no members).

    is_centroid : bool. Default: False.
        Whether 'seed' is a centroid instead
        of a member TAC.
    """
    def __init__(self,seed,is_centroid=False):
        seed = np.array(seed,dtype=np.float64)
        if seed.ndim!=1:
            raise ValueError("'seed' must be a 1D array!")

        self._centroid = seed
        self._count = 0
        self._peak_mean = 0.
        self._peak_m2 = 0. #sum of squared deviations from the peak mean

        if not is_centroid:
            self._centroid = np.zeros_like(seed)
            self.add(seed)

    def add(self,tac):
        """
        Add a TAC as a new member, updating
        the centroid and peak statistics.
        """
        tac = np.asarray(tac,dtype=np.float64)
        self._count += 1
        self._centroid = self._centroid + (tac-self._centroid)/self._count

        #Welford's online update
        peak = float(np.max(tac))
        delta = peak-self._peak_mean
        self._peak_mean += delta/self._count
        self._peak_m2 += delta*(peak-self._peak_mean)

    def is_empty(self):
        return self._count==0

    def size(self):
        return self._count

    def get_centroid(self):
        return self._centroid

    def get_peak_mean(self):
        return self._peak_mean

    def get_peak_stdev(self):
        """
        Sample standard deviation of the
        members' peaks (0 with less than
        two members).
        """
        if self._count<2:
            return 0.
        return float(np.sqrt(self._peak_m2/(self._count-1)))

    centroid = property(get_centroid)
    count = property(size)
    peak_mean = property(get_peak_mean)
    peak_stdev = property(get_peak_stdev)

    def __len__(self):
        return self._count

    def __repr__(self):
        return (f"Cluster(size={self._count}, peak_mean={self._peak_mean:.4g}, "
                f"peak_stdev={self.get_peak_stdev():.4g})")

def cluster_score(cluster):
    """
    Score used to rank clusters: peak
    mean times the number of members.
    """
    return cluster.get_peak_mean()*cluster.size()
