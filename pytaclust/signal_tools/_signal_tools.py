import numpy as np
from scipy.ndimage import uniform_filter1d
from scipy.spatial import distance

from ..data_utils.validation import _check_isnumber

_distance_functions = {
    'euclidean': distance.euclidean,
    'sqeuclidean': distance.sqeuclidean,
    'cityblock': distance.cityblock,
    'chebyshev': distance.chebyshev,
    'cosine': distance.cosine,
    'correlation': distance.correlation,
    'canberra': distance.canberra,
    'braycurtis': distance.braycurtis,
}

# TAC utils
def tac_peak(tac):
    """
    Peak amplitude (maximum sample) of a TAC.
    """
    return float(np.max(tac))

def smooth_tac(tac):
    """
    Smooth a TAC with a 3-point centred moving
    average. The first and last samples are
    averaged with a replicated copy of themselves.

    The input is not modified.

    Params:
    -------
    tac : array-like of shape (n_frames,).

    Returns:
    --------
    smoothed : ndarray of shape (n_frames,).
    """
    tac = np.asarray(tac,dtype=np.float64)
    return uniform_filter1d(tac,size=3,mode='nearest')

def pearson_correlation(tac,others):
    """
    Pearson correlation coefficient between a TAC
    and another TAC, or each row of a 2D array.

    Params:
    -------
    tac : array-like of shape (n_frames,).

    others : array-like of shape (n_frames,) or (n_tacs,n_frames).

    Returns:
    --------
    r : float or ndarray of shape (n_tacs,).
        nan where any of the TACs is constant.
    """
    tac = np.asarray(tac,dtype=np.float64)
    others = np.asarray(others,dtype=np.float64)
    single = others.ndim==1
    others = np.atleast_2d(others)

    x = tac-tac.mean()
    Y = others-others.mean(axis=1,keepdims=True)
    with np.errstate(divide='ignore',invalid='ignore'):
        r = (Y@x)/(np.linalg.norm(Y,axis=1)*np.linalg.norm(x))
    r = np.clip(r,-1.,1.)

    return float(r[0]) if single else r

def get_metric(metric):
    """
    Get the distance function used to compare
    a TAC with a cluster centroid.

    Params:
    -------
    metric : str or callable.
        Name of a distance from
        scipy.spatial.distance ('euclidean',
        'sqeuclidean', 'cityblock', 'chebyshev',
        'cosine', 'correlation', 'canberra',
        'braycurtis'), or a function
        distance(a, b) -> float.

    Returns:
    --------
    distance : callable.
    """
    if callable(metric):
        return metric
    if not isinstance(metric,str):
        raise TypeError("'metric' must be a string or a callable!")
    if metric not in _distance_functions:
        raise ValueError(f"'metric' must be one of {list(_distance_functions)} "
                        "or a callable.")
    return _distance_functions[metric]

class PeakNoiseFilter:
    """
    Flags as noise the TACs whose peak
    amplitude is not above a threshold, or
    that contain non-finite samples.

    Params:
    -------
    threshold : None, int or float.
        Peak value at or below which a TAC
        is noise. If None, the threshold is
        estimated with 'fit' from the peaks
        of all the voxels, and only the TACs
        whose peak is below it are noise.

    percentile : int or float. Default: 10.
        Percentile of the voxels' peaks used
        as threshold when 'threshold' is None.
    """
    def __init__(self,threshold=None,percentile=10.):
        if threshold is not None:
            _check_isnumber({'threshold':threshold})
        _check_isnumber({'percentile':percentile})
        if not 0<=percentile<=100:
            raise ValueError("'percentile' must be between 0 and 100.")

        self.threshold = threshold
        self.percentile = percentile
        self.threshold_ = threshold

    def fit(self,volume):
        """
        Estimate the threshold from the
        peaks of every voxel of 'volume'
        (only if no fixed threshold was set).
        """
        if self.threshold is None:
            peaks = volume.peaks()
            peaks = peaks[np.isfinite(peaks)]
            self.threshold_ = float(np.percentile(peaks,self.percentile)) if peaks.size else np.inf
        return self

    def is_noise(self,tac):
        if self.threshold_ is None:
            raise Exception("You have to fit the filter first by using the 'fit' method.")
        tac = np.asarray(tac)
        if not np.all(np.isfinite(tac)):
            return True
        if self.threshold is None:
            #peaks tied with the fitted percentile are kept
            return tac_peak(tac)<self.threshold_
        return tac_peak(tac)<=self.threshold_

    def __repr__(self):
        return f"PeakNoiseFilter(threshold={self.threshold_}, percentile={self.percentile})"

def _get_noise_filter(skip_noisy,noise_filter,volume):
    """
    Noise filter to use for a clustering run
    over 'volume'. None if 'skip_noisy' is False.
    The default filter is a PeakNoiseFilter
    fitted on the volume.
    """
    if not skip_noisy:
        return None
    if noise_filter is None:
        noise_filter = PeakNoiseFilter()
    if isinstance(noise_filter,PeakNoiseFilter):
        noise_filter.fit(volume)
    return noise_filter
