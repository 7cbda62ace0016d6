"""Class to execute a TAC clustering run."""

import os

from sklearn.utils import Bunch

from .clustering import KMeansTAC,LeaderFollower
from .data_utils import (
    TACVolume,
    load_volume,
    clusters_summary
)
from .data_utils import save_results as save_clustering_results
from .signal_tools import get_metric
from .data_utils.validation import (
    parse_param,
    _check_isbool,
    _check_noise_filter
)

#Default value and type of the parameters of each technique
DEFAULTS = {
    'kmeans': {
        'k':(5,int),
        'initial_centroids':(None,str),
        'tolerance':(0.,float),
        'max_iterations':(100,int),
        'metric':('euclidean',str),
        },
    'leader_follower': {
        'max_clusters':(1000,int),
        'discard_smallest':(False,bool),
        'keep_clusters':(50,int),
        'threshold':(0.3,float),
        'threshold_increment':(1.,float),
        },
    }

class TACClustering:
    """
    Class to cluster the voxels of a dynamic
    image according to their Time-Activity
    Curves (TACs) and explore the results.

    Params:
    -------
    data : TACVolume, ndarray or str.
        The image to cluster: a TACVolume, an array
        of shape (size_x,size_y,n_slices,n_frames), or
        the path to a .npy, .pkl, .nii or .nii.gz file.

    skip_noisy : bool.
        Whether to leave out of the clustering the
        voxels flagged as noise.

    noise_filter : None or object with 'is_noise' method.
        Filter used when 'skip_noisy' is True. If None,
        a PeakNoiseFilter fitted on the image is used.

    Attributes:
    -----------
    volume : TACVolume.
        The loaded image.

    model_ : KMeansTAC or LeaderFollower.
        The fitted model of the last run.

    results_ : Bunch.
        Results of the last run.
    """
    def __init__(self,data,skip_noisy=False,noise_filter=None):
        if isinstance(data,str):
            self.volume = load_volume(data)
        elif isinstance(data,TACVolume):
            self.volume = data
        else:
            self.volume = TACVolume(data)

        _check_isbool({'skip_noisy':skip_noisy})
        _check_noise_filter(noise_filter)

        self.skip_noisy = skip_noisy
        self.noise_filter = noise_filter

    def fit_predict(self,technique='kmeans',save_results=False,path=None,random_state=None,**params):
        """
        Cluster the voxels of the image.

        Params:
        -------
        technique : str {'kmeans','leader_follower'}.
            Clustering technique to use.

        save_results : bool.
            Whether to save the results in
            '{path}/TAC_clustering_results'.

        path : str or None.
            Where to create the results folder.
            If None, the current folder is used.

        random_state : None | int.
            Determines random number generation for
            the k-means centroids initialization.

        **params : parameters of the technique.
            Values may be numbers or text (as typed by
            a user). Values that can't be interpreted are
            replaced by the defaults:
            - kmeans: k=5, initial_centroids=None,
              tolerance=0 (%), max_iterations=100,
              metric='euclidean'.
            - leader_follower: max_clusters=1000,
              discard_smallest=False, keep_clusters=50,
              threshold=0.3, threshold_increment=1.

        Returns:
        --------
        results : Bunch.
            'labels', 'centroids', 'clusters', 'summary',
            'technique' and 'params', plus 'n_iter' and
            'state' (k-means) or 'n_formed' and 'n_lost'
            (leader-follower).
        """
        if not isinstance(technique,str):
            raise TypeError("'technique' must be a string!")
        if technique not in DEFAULTS:
            raise ValueError(f"'technique' must be one of {list(DEFAULTS)}.")

        _check_isbool({'save_results':save_results})

        params = self._parse_params(technique,params)

        print(f"\n-STARTING THE CLUSTERING ({technique}):\n"
              f" {self.volume}")

        if technique=='kmeans':
            model = KMeansTAC(
                skip_noisy=self.skip_noisy,
                noise_filter=self.noise_filter,
                verbose=True,
                **params
                )
            model.fit(self.volume,random_state=random_state)
            extra = {'n_iter':model.n_iter_,'state':model.state_.value}
        else:
            model = LeaderFollower(
                skip_noisy=self.skip_noisy,
                noise_filter=self.noise_filter,
                verbose=True,
                **params
                )
            model.fit(self.volume)
            extra = {'n_formed':model.n_formed_,'n_lost':model.n_lost_}

        self.model_ = model
        self.results_ = Bunch(
            labels=model.labels_,
            centroids=model.cluster_centers_,
            clusters=model.clusters_,
            summary=clusters_summary(model.clusters_),
            technique=technique,
            params=params,
            **extra
            )

        if save_results:
            results_path = 'TAC_clustering_results' if path is None else f'{path}/TAC_clustering_results'
            if not os.path.exists(results_path):
                print(f"-Creating folder to save results: './{results_path}'")
            save_clustering_results(self.results_,results_path)
            print(f"-All the results were save in './{results_path}'")

        print("\n** THE CLUSTERING HAS FINISHED SUCCESFULLY!")

        return self.results_

    def _parse_params(self,technique,params):
        """
        Convert the parameters provided by the user
        to the types expected by 'technique', using
        the default value of those that can't be
        converted.
        """
        defaults = DEFAULTS[technique]
        unknown = [p for p in params if p not in defaults]
        if unknown:
            raise ValueError(f"Unknown parameter/s for '{technique}': {unknown}. "
                            f"Valid parameters are: {list(defaults)}.")

        parsed = {}
        for name,(default,cast) in defaults.items():
            if name=='metric':
                value = self._parse_metric(params.get(name),default)
            else:
                value = parse_param(params.get(name),default,cast)
            parsed[name] = value

        #numbers out of range also fall back to the defaults
        for name in ['k','max_iterations','max_clusters','keep_clusters']:
            if name in parsed and parsed[name]<1:
                parsed[name] = defaults[name][0]
        if technique=='kmeans' and parsed['tolerance']<0:
            parsed['tolerance'] = defaults['tolerance'][0]
        if technique=='leader_follower' and parsed['threshold_increment']<=0:
            parsed['threshold_increment'] = defaults['threshold_increment'][0]

        return parsed

    def _parse_metric(self,metric,default):
        """
        Distance name or function provided by the
        user, or 'default' if it isn't available.
        """
        if metric is None:
            return default
        if not callable(metric):
            metric = str(metric).strip().lower()
        try:
            get_metric(metric)
        except (TypeError,ValueError):
            return default
        return metric
