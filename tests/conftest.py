import numpy as np
import pytest

from pytaclust.data_utils import TACVolume

def _volume_from_tacs(tacs):
    """
    Volume of shape (n_tacs,1,1,n_frames): the
    i-th TAC is voxel (i, 0, 1), so the iteration
    order is the order of 'tacs'.
    """
    tacs = np.asarray(tacs,dtype=np.float64)
    return TACVolume(tacs[:,np.newaxis,np.newaxis,:])

@pytest.fixture
def volume_from_tacs():
    return _volume_from_tacs

@pytest.fixture
def two_groups_volume():
    return _volume_from_tacs([
        [0.,0.,0.],
        [0.1,0.,0.],
        [10.,10.,10.],
        [10.1,10.,10.],
        ])

@pytest.fixture
def random_volume():
    rng = np.random.RandomState(0)
    return TACVolume(rng.rand(6,5,3,8))
