import numpy as np
import pytest
from scipy.stats import pearsonr

from pytaclust.signal_tools import (
    tac_peak,
    smooth_tac,
    pearson_correlation,
    get_metric,
    PeakNoiseFilter
)
from pytaclust.data_utils import TACVolume

def test_smooth_tac():
    tac = np.array([0.,3.,6.])
    assert np.allclose(smooth_tac(tac),[1.,3.,5.])
    assert np.array_equal(tac,[0.,3.,6.])

def test_tac_peak():
    assert tac_peak([1.,7.,3.])==7.

def test_pearson_correlation():
    a = np.array([1.,2.,3.,4.])
    assert pearson_correlation(a,2*a+1)==pytest.approx(1.)
    assert pearson_correlation(a,-a)==pytest.approx(-1.)
    assert np.isnan(pearson_correlation(a,np.ones(4)))

def test_pearson_correlation_rows():
    rng = np.random.RandomState(1)
    tac = rng.rand(10)
    others = rng.rand(4,10)
    r = pearson_correlation(tac,others)
    assert r.shape==(4,)
    expected = [np.corrcoef(tac,row)[0,1] for row in others]
    assert np.allclose(r,expected)

def test_pearson_correlation_matches_scipy():
    rng = np.random.RandomState(5)
    tac = rng.rand(12)
    others = rng.rand(6,12)
    r = pearson_correlation(tac,others)
    expected = [pearsonr(tac,row)[0] for row in others]
    assert np.allclose(r,expected)
    assert pearson_correlation(tac,others[0])==pytest.approx(pearsonr(tac,others[0])[0])

def test_get_metric():
    assert get_metric('euclidean')([0.,0.],[3.,4.])==pytest.approx(5.)
    assert get_metric('cityblock')([0.,0.],[3.,4.])==pytest.approx(7.)

    def my_distance(a,b):
        return 0.
    assert get_metric(my_distance) is my_distance

    with pytest.raises(ValueError):
        get_metric('not_a_metric')
    with pytest.raises(TypeError):
        get_metric(3)

def test_noise_filter_fixed_threshold():
    nf = PeakNoiseFilter(threshold=1.)
    assert nf.is_noise([0.,1.,0.5])
    assert not nf.is_noise([0.,2.])
    assert nf.is_noise([np.nan,5.])

def test_noise_filter_percentile():
    data = np.arange(10,dtype=float).reshape(10,1,1,1)*np.ones((1,1,1,3))
    nf = PeakNoiseFilter(percentile=50).fit(TACVolume(data))
    assert nf.threshold_==pytest.approx(4.5)
    assert nf.is_noise([4.,4.,4.])
    assert not nf.is_noise([5.,5.,5.])

def test_noise_filter_must_be_fitted():
    with pytest.raises(Exception):
        PeakNoiseFilter().is_noise([1.,2.])

def test_noise_filter_validation():
    with pytest.raises(ValueError):
        PeakNoiseFilter(percentile=150)
    with pytest.raises(TypeError):
        PeakNoiseFilter(threshold='1')

def test_noise_filter_percentile_ties():
    data = np.ones((4,1,1,3))*np.array([1.,2.,3.])
    nf = PeakNoiseFilter().fit(TACVolume(data))
    assert nf.threshold_==pytest.approx(3.)
    assert not nf.is_noise([1.,2.,3.])
    assert nf.is_noise([1.,2.,2.9])
    #a fixed threshold still flags peaks equal to it
    assert PeakNoiseFilter(threshold=3.).fit(TACVolume(data)).is_noise([1.,2.,3.])
