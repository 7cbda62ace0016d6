"""Utilities for input validation"""

import numbers

import numpy as np

from ._data_utils import TACVolume

_TRUE_STRINGS = ('true','yes','y','on','1')
_FALSE_STRINGS = ('false','no','n','off','0')

def _check_isint(dct):
    """
    Validate if each value in
    dictionary is an integer.

    Params:
    -------
    dct : dict
        Keys are parameter's names,
        and values contain the values
        provided by the user for each
        parameter.
    """
    for param in dct.keys():
        if isinstance(dct[param],bool) or not isinstance(dct[param],(int,np.integer)):
            raise TypeError(f"'{param}' must be an integer")

def _check_isnumber(dct):
    """
    Validate if each value in
    dictionary is a real number
    (integer or float).
    """
    for param in dct.keys():
        if isinstance(dct[param],bool) or not isinstance(dct[param],numbers.Real):
            raise TypeError(f"'{param}' must be an integer or a floating number")

def _check_isbool(dct):
    """
    Validate if each value in
    dictionary is True or False.
    """
    for param in dct.keys():
        if not isinstance(dct[param],(bool,np.bool_)):
            raise TypeError(f"'{param}' must be True or False")

def _check_noise_filter(noise_filter):
    """
    Check that the provided noise filter
    exposes an 'is_noise' method.

    Params:
    -------
    noise_filter : value provided by the user.
    """
    if noise_filter is not None and not callable(getattr(noise_filter,'is_noise',None)):
        raise TypeError("'noise_filter' must have an 'is_noise(tac)' method.")

def parse_param(value,default,cast=float):
    """
    Convert a parameter typed by the user
    (usually text) to the requested type.
    If the conversion is not possible, the
    default value is returned instead.

    Params:
    -------
    value : str, number, bool or None.
        Value provided by the user.

    default : any.
        Value to use when 'value' can't
        be converted.

    cast : type {int, float, bool, str}.
        Target type.

    Returns:
    --------
    parsed : the converted value or 'default'.
    """
    if value is None:
        return default

    if cast is bool:
        if isinstance(value,(bool,np.bool_)):
            return bool(value)
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return default

    if cast is str:
        return str(value)

    if isinstance(value,bool):
        return default

    try:
        if cast is int:
            if isinstance(value,str):
                return int(value.strip())
            if float(value)!=int(value):
                return default
            return int(value)
        parsed = float(value)
    except (TypeError,ValueError,OverflowError):
        return default

    if not np.isfinite(parsed):
        return default
    return parsed

def _check_volume(volume):
    """
    Check that 'volume' is a TACVolume, or
    wrap it if it is a numpy array.

    Returns:
    --------
    volume : TACVolume.
    """
    if isinstance(volume,TACVolume):
        return volume
    if isinstance(volume,np.ndarray):
        return TACVolume(volume)
    raise TypeError("'volume' must be a TACVolume or a numpy array!")
