import numpy as np
import pandas as pd
import pytest

from pytaclust import TACClustering,KMeansTAC,LeaderFollower
from pytaclust.data_utils import load_results

@pytest.fixture
def two_groups_data():
    data = np.zeros((4,2,1,5))
    data[:2] = [1.,2.,3.,4.,5.]
    data[2:] = [5.,4.,3.,2.,1.]
    return data

def test_parse_kmeans_params(two_groups_data):
    clust = TACClustering(two_groups_data)
    params = clust._parse_params('kmeans',{
        'k':'abc',
        'tolerance':'1.5',
        'max_iterations':'20',
        'initial_centroids':'0,0,1',
        'metric':'unknown'
        })
    assert params=={
        'k':5,
        'initial_centroids':'0,0,1',
        'tolerance':1.5,
        'max_iterations':20,
        'metric':'euclidean'
        }

def test_parse_leader_follower_params(two_groups_data):
    clust = TACClustering(two_groups_data)
    params = clust._parse_params('leader_follower',{
        'max_clusters':'-3',
        'discard_smallest':'yes',
        'keep_clusters':'10',
        'threshold':'high',
        'threshold_increment':'1.1'
        })
    assert params=={
        'max_clusters':1000,
        'discard_smallest':True,
        'keep_clusters':10,
        'threshold':0.3,
        'threshold_increment':1.1
        }

def test_unknown_parameter(two_groups_data):
    with pytest.raises(ValueError):
        TACClustering(two_groups_data).fit_predict('kmeans',n_clusters=3)

def test_unknown_technique(two_groups_data):
    with pytest.raises(ValueError):
        TACClustering(two_groups_data).fit_predict('dbscan')

def test_kmeans_run(two_groups_data,capsys):
    clust = TACClustering(two_groups_data)
    results = clust.fit_predict('kmeans',k='2',initial_centroids='0,0,1;2,0,1')

    assert isinstance(clust.model_,KMeansTAC)
    assert results.technique=='kmeans'
    assert results.state=='converged'
    assert results.labels.shape==(4,2,1)
    assert np.array_equal(results.labels[:,:,0],[[1,1],[1,1],[2,2],[2,2]])
    assert results.centroids.shape==(2,5)
    assert isinstance(results.summary,pd.DataFrame)
    assert results.summary['size'].tolist()==[4,4]
    assert "THE CLUSTERING HAS FINISHED" in capsys.readouterr().out

def test_leader_follower_run(two_groups_data):
    clust = TACClustering(two_groups_data)
    results = clust.fit_predict('leader_follower',threshold='0.5')

    assert isinstance(clust.model_,LeaderFollower)
    assert results.n_formed==2
    assert results.n_lost==0
    assert results.params['threshold']==0.5
    assert sorted(results.summary['size'].tolist())==[4,4]

def test_skip_noisy(two_groups_data):
    two_groups_data[0,0,0] = 0.
    clust = TACClustering(two_groups_data,skip_noisy=True)
    results = clust.fit_predict('kmeans',k=2,initial_centroids='0,1,1;2,0,1')
    assert results.labels[0,0,0]==0
    assert results.summary['size'].sum()==7

def test_save_and_load_results(two_groups_data,tmp_path):
    clust = TACClustering(two_groups_data)
    results = clust.fit_predict(
        'kmeans',
        k=2,
        initial_centroids='0,0,1;2,0,1',
        save_results=True,
        path=str(tmp_path)
        )

    loaded = load_results(str(tmp_path/'TAC_clustering_results'))
    assert np.array_equal(loaded.labels,results.labels)
    assert np.allclose(loaded.centroids,results.centroids)
    assert loaded.summary['size'].tolist()==results.summary['size'].tolist()
    assert loaded.technique=='kmeans'
    assert loaded.params['k']==2

def test_load_results_missing(tmp_path):
    with pytest.raises(Exception):
        load_results(str(tmp_path))

def test_data_from_file(two_groups_data,tmp_path):
    np.save(tmp_path/'image.npy',two_groups_data)
    clust = TACClustering(str(tmp_path/'image.npy'))
    assert clust.volume.dimensions==(4,2,1)
    assert clust.volume.n_frames==5
