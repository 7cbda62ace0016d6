import os
import pickle
from collections import namedtuple

import numpy as np
import pandas as pd
from nilearn.image import load_img
from sklearn.utils import Bunch

Voxel = namedtuple('Voxel',['x','y','slice','tac'])
Voxel.__doc__ = """Spatial origin (x, y, 1-based slice) and TAC of a voxel."""

class TACVolume:
    """
    Provider of the Time-Activity Curve (TAC)
    of every voxel of a 3D image sequence.

    Params:
    -------
    data : ndarray of shape (size_x, size_y, n_slices, n_frames).
        Dynamic image. A 3D array of shape
        (size_x, size_y, n_frames) is treated
        as a single slice.

    Notes:
    ------
    Slices are 1-based when addressing voxels
    (x and y are 0-based). Iteration is
    slice-major, then x, then y.
    """
    def __init__(self,data):
        if not isinstance(data,np.ndarray):
            raise TypeError("'data' must be a numpy array!")
        if data.ndim==3:
            data = data[:,:,np.newaxis,:]
        if data.ndim!=4:
            raise ValueError("'data' must be a 4D array with shape "
                            "(size_x, size_y, n_slices, n_frames).")
        if 0 in data.shape:
            raise ValueError(f"'data' can't have empty dimensions (shape: {data.shape}).")

        self._data = np.array(data,dtype=np.float64)
        self._data.setflags(write=False)

    @property
    def dimensions(self):
        """(size_x, size_y, n_slices)"""
        return tuple(int(d) for d in self._data.shape[:3])

    @property
    def n_frames(self):
        return int(self._data.shape[3])

    @property
    def n_voxels(self):
        size_x,size_y,n_slices = self.dimensions
        return size_x*size_y*n_slices

    def get_tac(self,x,y,slice):
        """
        Return the TAC of voxel (x, y, slice),
        with 'slice' starting at 1.
        """
        size_x,size_y,n_slices = self.dimensions
        if not (0<=x<size_x and 0<=y<size_y and 1<=slice<=n_slices):
            raise IndexError(f"Voxel ({x}, {y}, {slice}) is out of the volume "
                            f"bounds {self.dimensions}.")
        return self._data[x,y,slice-1,:]

    def __iter__(self):
        size_x,size_y,n_slices = self.dimensions
        for slice in range(1,n_slices+1):
            for x in range(size_x):
                for y in range(size_y):
                    yield Voxel(x,y,slice,self._data[x,y,slice-1,:])

    def __len__(self):
        return self.n_voxels

    def scan_order(self):
        """
        All voxels in iteration order.

        Returns:
        --------
        coordinates : ndarray of shape (n_voxels,3).
            (x, y, slice) of each voxel, 1-based slice.

        tacs : ndarray of shape (n_voxels,n_frames).
            TAC of each voxel.
        """
        size_x,size_y,n_slices = self.dimensions
        tacs = self._data.transpose(2,0,1,3).reshape(-1,self.n_frames)
        slices,xs,ys = np.meshgrid(
            np.arange(1,n_slices+1),
            np.arange(size_x),
            np.arange(size_y),
            indexing='ij'
            )
        coordinates = np.column_stack([xs.ravel(),ys.ravel(),slices.ravel()])
        return coordinates,tacs

    def peaks(self):
        """Peak (max sample) of every voxel, in iteration order."""
        return self.scan_order()[1].max(axis=1)

    def empty_labels(self):
        """Label volume with every voxel unassigned (0)."""
        return np.zeros(self.dimensions,dtype=np.int32)

    def __repr__(self):
        size_x,size_y,n_slices = self.dimensions
        return (f"TACVolume(size_x={size_x}, size_y={size_y}, "
                f"n_slices={n_slices}, n_frames={self.n_frames})")

#General functions

def load_dictionary(filepath):
    """
    Load dictionary from pickle (.pkl)
    file in local folder.

    Params:
    --------
    filepath : str.
        Specify the path to the pickle
        file to be loaded.

    Returns:
    --------
    dict_ : dict.
        Loaded dictionary.
    """
    with open(filepath, 'rb') as file:
        dict_ = pickle.load(file)
        return dict_

def save_dictionary(filename,dictionary):
    """
    Save dictionary in local folder
    as a pickle (.pkl) file.

    Params:
    --------
    filename : str.
        Specify the name (and optionally the
        path) of the pickle file to be saved.
    """
    with open(f'{filename}.pkl', 'wb') as file:
        pickle.dump(dictionary, file)

def clusters_summary(clusters):
    """
    Tabulate the size and peak statistics
    of each cluster.

    Params:
    -------
    clusters : list of Cluster.

    Returns:
    --------
    summary : pd.DataFrame.
        One row per cluster (label 1 is the
        first cluster of the list).
    """
    rows = []
    for idx,c in enumerate(clusters):
        rows.append({
            'label':idx+1,
            'size':c.size(),
            'peak_mean':c.get_peak_mean(),
            'peak_stdev':c.get_peak_stdev(),
            'score':c.get_peak_mean()*c.size()
            })
    return pd.DataFrame(rows,columns=['label','size','peak_mean','peak_stdev','score'])

#Load input data
def load_volume(path):
    """
    Load a dynamic image from a .npy, .pkl,
    .nii or .nii.gz file.

    Params:
    -------
    path : str
        Path to the file.

    Returns:
    --------
    volume : TACVolume
    """
    if not isinstance(path,str):
        raise TypeError("'path' must be a string!")
    if not os.path.exists(path):
        raise ValueError(f"The file '{path}' couldn't be founded.")

    try:
        if path.endswith('.npy'):
            data = np.load(path)
        elif path.endswith('.pkl'):
            data = np.asarray(pd.read_pickle(path))
        elif path.endswith('.nii') or path.endswith('.nii.gz'):
            data = load_img(path).get_fdata()
        else:
            raise ValueError(f"Unsupported file format: '{path}'.")
    except ValueError:
        raise
    except Exception as e:
        raise Exception(f"The image '{path}' couldn't be loaded.") from e

    return TACVolume(data)

#Save and load results
def save_results(results,path):
    """
    Save the results of a clustering run
    in local folder.

    Files created in 'path':
        'labels.npy' : label volume.
        'centroids.csv' : one row per cluster.
        'clusters.csv' : size and peak statistics.
        'params.pkl' : technique and parameters used.

    Params:
    -------
    results : Bunch.
        As returned by 'TACClustering.fit_predict'.

    path : str.
        Folder where the files are saved.
        It's created if it doesn't exist.
    """
    if not os.path.exists(path):
        os.makedirs(path)

    np.save(f'{path}/labels.npy',results.labels)
    centroids = pd.DataFrame(
        results.centroids,
        index=pd.Index(np.arange(1,results.centroids.shape[0]+1),name='label'),
        columns=[f'frame_{t}' for t in range(results.centroids.shape[1])]
        )
    centroids.to_csv(f'{path}/centroids.csv',sep=',')
    results.summary.to_csv(f'{path}/clusters.csv',sep=',',index=False)
    save_dictionary(
        f'{path}/params',
        {'technique':results.technique,'params':results.params}
        )

def load_results(path):
    """
    Load the results saved with 'save_results'.

    Params:
    -------
    path : str.
        Folder that contains the files.

    Returns:
    --------
    results : Bunch with 'labels', 'centroids',
        'summary', 'technique' and 'params'.
    """
    try:
        labels = np.load(f'{path}/labels.npy')
        centroids = pd.read_csv(f'{path}/centroids.csv',sep=',',index_col=0).values
        summary = pd.read_csv(f'{path}/clusters.csv',sep=',')
        params = load_dictionary(f'{path}/params.pkl')
    except Exception as e:
        raise Exception("The results couldn't be loaded. Check that the files "
                        "are located in the provided 'path'.") from e

    return Bunch(
        labels=labels,
        centroids=centroids,
        summary=summary,
        technique=params['technique'],
        params=params['params']
        )
