"""Initial centroids (seeds) for the k-means technique"""

import re

from sklearn.utils import check_random_state

_INT_PATTERN = re.compile(r'[+-]?[0-9]+')

def _split_fields(text,sep):
    """
    Split 'text' by 'sep', ignoring the
    trailing empty fields.
    """
    fields = text.split(sep)
    while len(fields)>1 and fields[-1]=='':
        fields.pop()
    return fields

def parse_seeds(text,dimensions):
    """
    Parse and validate a string with the coordinates
    of the voxels to use as initial centroids.

    The string must have the format 'x1,y1,s1;x2,y2,s2',
    where x and y start at 0 and the slice s starts at 1.
    A single trailing ';' is trimmed together with the
    character before it, so '1,2,3;' is rejected.

    Params:
    -------
    text : str or None.
        Coordinates provided by the user.

    dimensions : tuple (size_x, size_y, n_slices).
        Dimensions of the volume.

    Returns:
    --------
    seeds : list of tuples (x, y, slice) | None.
        None if 'text' is empty or not valid.
    """
    if text is None:
        return None
    if not isinstance(text,str):
        raise TypeError("'text' must be a string or None!")

    text = text.strip()
    if text=='':
        return None

    if text.endswith(';'):
        text = text[:-2]

    #badly formed string
    if text.endswith(','):
        return None

    #two commas per triplet and one semicolon between triplets
    comma_count = len(_split_fields(text,','))-1
    sc_count = len(_split_fields(text,';'))-1
    if comma_count%2!=0 or comma_count!=sc_count*2+2:
        return None

    size_x,size_y,n_slices = dimensions
    seeds = []
    for triplet in _split_fields(text,';'):
        coordinates = _split_fields(triplet,',')
        if len(coordinates)!=3:
            return None
        if not all(_INT_PATTERN.fullmatch(c) for c in coordinates):
            return None

        x,y,slice = (int(c) for c in coordinates)
        if not (0<=x<size_x and 0<=y<size_y and 1<=slice<=n_slices):
            return None
        seeds.append((x,y,slice))

    return seeds

def random_seeds(volume,n_seeds,random_state=None,noise_filter=None):
    """
    Draw voxel coordinates uniformly at random.

    Params:
    -------
    volume : TACVolume.

    n_seeds : int.
        Number of coordinates to draw.

    random_state : None, int or np.random.RandomState.
        Determines random number generation.

    noise_filter : None or object with 'is_noise' method.
        If provided, a coordinate is drawn again
        while its TAC is flagged as noise.

    Returns:
    --------
    seeds : list of tuples (x, y, slice).
        Coordinates may be repeated.
    """
    rng = check_random_state(random_state)
    size_x,size_y,n_slices = volume.dimensions

    seeds = []
    for _ in range(n_seeds):
        while True:
            seed = (
                int(rng.randint(size_x)),
                int(rng.randint(size_y)),
                int(rng.randint(n_slices))+1
                )
            if noise_filter is None or not noise_filter.is_noise(volume.get_tac(*seed)):
                break
        seeds.append(seed)

    return seeds

def format_seeds(seeds):
    """
    Build the string that reproduces
    an initialization with 'parse_seeds'.
    E.g.: [(1,2,3),(4,5,6)] -> '1,2,3;4,5,6'
    """
    return ';'.join(','.join(str(c) for c in seed) for seed in seeds)
