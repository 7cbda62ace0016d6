import numpy as np
import pandas as pd
import pytest

from pytaclust.clustering import Cluster
from pytaclust.data_utils import (
    TACVolume,
    Voxel,
    load_volume,
    clusters_summary
)
from pytaclust.data_utils.validation import parse_param

def _indexed_volume():
    #each TAC holds its own coordinates: (x, y, slice)
    data = np.zeros((3,2,2,3))
    for x in range(3):
        for y in range(2):
            for s in range(2):
                data[x,y,s] = [x,y,s+1]
    return TACVolume(data)

def test_dimensions():
    volume = _indexed_volume()
    assert volume.dimensions==(3,2,2)
    assert volume.n_frames==3
    assert volume.n_voxels==12
    assert len(volume)==12

def test_get_tac_slices_start_at_one():
    volume = _indexed_volume()
    assert np.array_equal(volume.get_tac(2,1,1),[2,1,1])
    assert np.array_equal(volume.get_tac(0,0,2),[0,0,2])
    with pytest.raises(IndexError):
        volume.get_tac(0,0,0)
    with pytest.raises(IndexError):
        volume.get_tac(3,0,1)

def test_iteration_order():
    voxels = list(_indexed_volume())
    coordinates = [(v.x,v.y,v.slice) for v in voxels]
    expected = [(x,y,s) for s in (1,2) for x in range(3) for y in range(2)]
    assert coordinates==expected
    assert isinstance(voxels[0],Voxel)
    for v in voxels:
        assert np.array_equal(v.tac,[v.x,v.y,v.slice])

def test_scan_order_matches_iteration():
    volume = _indexed_volume()
    coordinates,tacs = volume.scan_order()
    assert [tuple(c) for c in coordinates]==[(v.x,v.y,v.slice) for v in volume]
    assert np.array_equal(tacs,coordinates)

def test_tacs_are_read_only():
    volume = _indexed_volume()
    with pytest.raises(ValueError):
        volume.get_tac(0,0,1)[0] = 10.

def test_data_is_copied():
    data = np.ones((2,2,1,3))
    volume = TACVolume(data)
    data[0,0,0,0] = 5.
    assert volume.get_tac(0,0,1)[0]==1.

def test_single_slice_volume():
    volume = TACVolume(np.ones((4,3,5)))
    assert volume.dimensions==(4,3,1)
    assert volume.n_frames==5

def test_invalid_volume():
    with pytest.raises(TypeError):
        TACVolume([[1,2,3]])
    with pytest.raises(ValueError):
        TACVolume(np.ones((2,3)))
    with pytest.raises(ValueError):
        TACVolume(np.ones((2,0,1,3)))

def test_load_npy(tmp_path):
    data = np.random.RandomState(0).rand(3,3,2,4)
    np.save(tmp_path/'image.npy',data)
    volume = load_volume(str(tmp_path/'image.npy'))
    assert volume.dimensions==(3,3,2)
    assert np.allclose(volume.get_tac(1,2,2),data[1,2,1])

def test_load_nifti(tmp_path):
    nib = pytest.importorskip('nibabel')
    data = np.random.RandomState(0).rand(3,3,2,4).astype(np.float32)
    nib.save(nib.Nifti1Image(data,np.eye(4)),str(tmp_path/'image.nii.gz'))
    volume = load_volume(str(tmp_path/'image.nii.gz'))
    assert volume.dimensions==(3,3,2)
    assert np.allclose(volume.get_tac(0,1,1),data[0,1,0])

def test_load_volume_errors(tmp_path):
    with pytest.raises(ValueError):
        load_volume(str(tmp_path/'missing.npy'))
    (tmp_path/'image.txt').write_text('1,2,3')
    with pytest.raises(ValueError):
        load_volume(str(tmp_path/'image.txt'))

def test_clusters_summary():
    c1 = Cluster([1.,4.])
    c1.add([2.,2.])
    c2 = Cluster([5.,0.])
    summary = clusters_summary([c1,c2])
    assert isinstance(summary,pd.DataFrame)
    assert list(summary.label)==[1,2]
    assert list(summary['size'])==[2,1]
    assert summary.score.tolist()==pytest.approx([6.,5.])

@pytest.mark.parametrize("value,default,cast,expected",[
    ("12",5,int,12),
    ("abc",5,int,5),
    ("3.5",5,int,5),
    (7,5,int,7),
    (None,5,int,5),
    ("0.75",0.3,float,0.75),
    ("nan",0.3,float,0.3),
    ("",0.3,float,0.3),
    (True,0.3,float,0.3),
    ("yes",False,bool,True),
    ("0",True,bool,False),
    ("maybe",False,bool,False),
    ("1,2,3",None,str,"1,2,3"),
    ])
def test_parse_param(value,default,cast,expected):
    assert parse_param(value,default,cast)==expected
