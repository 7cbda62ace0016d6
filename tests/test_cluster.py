import numpy as np
import pytest

from pytaclust.clustering import Cluster,cluster_score

def test_centroid_is_mean_of_members():
    rng = np.random.RandomState(42)
    tacs = rng.rand(50,12)*100
    c = Cluster(tacs[0])
    for tac in tacs[1:]:
        c.add(tac)

    assert c.size()==50
    assert np.allclose(c.get_centroid(),tacs.mean(axis=0))

def test_cluster_from_centroid_starts_empty():
    c = Cluster([5.,5.,5.],is_centroid=True)
    assert c.is_empty()
    assert len(c)==0
    assert np.array_equal(c.get_centroid(),[5.,5.,5.])

    c.add([1.,2.,3.])
    assert not c.is_empty()
    assert np.array_equal(c.get_centroid(),[1.,2.,3.])
    assert c.get_peak_mean()==3.

def test_peak_statistics():
    c = Cluster([0.,3.])
    assert c.get_peak_stdev()==0.
    c.add([5.,1.])
    c.add([10.,2.])

    peaks = np.array([3.,5.,10.])
    assert c.get_peak_mean()==pytest.approx(peaks.mean())
    assert c.get_peak_stdev()==pytest.approx(peaks.std(ddof=1))
    assert c.peak_mean==c.get_peak_mean()
    assert c.peak_stdev==c.get_peak_stdev()

def test_seed_is_copied():
    seed = np.array([1.,2.,3.])
    c = Cluster(seed)
    seed[0] = 100.
    assert c.get_centroid()[0]==1.

def test_centroid_returned_is_not_updated_in_place():
    c = Cluster([1.,1.])
    previous = c.get_centroid()
    c.add([3.,3.])
    assert np.array_equal(previous,[1.,1.])
    assert np.array_equal(c.centroid,[2.,2.])

def test_cluster_score():
    c = Cluster([0.,4.])
    c.add([6.,0.])
    assert cluster_score(c)==pytest.approx(5.*2)

def test_seed_must_be_1d():
    with pytest.raises(ValueError):
        Cluster(np.ones((2,3)))
