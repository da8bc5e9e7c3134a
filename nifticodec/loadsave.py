# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Utilities to load and save NIfTI-1 objects"""
from __future__ import annotations

import os
import typing as ty

from .errors import InvalidFormat
from .filename_parser import _stringify_path, splitext_addext
from .image import NiftiObject

if ty.TYPE_CHECKING:  # pragma: no cover
    from .filename_parser import FileSpec

_gz_signature = b'\x1f\x8b'


def _signature_matches_extension(filename: FileSpec) -> tuple[bool, str]:
    """Check gzip magic number of `filename`, if it ends with ``.gz``

    Returns
    -------
    matches : bool
       True if `filename` does not end with ``.gz``, or it does, and the
       file starts with the gzip magic number.  False otherwise.
    error_message : str
       An error message if opening the file failed or a mismatch is detected;
       the empty string otherwise.
    """
    filename = _stringify_path(filename)
    *_, ext = splitext_addext(filename)
    if ext.lower() != '.gz':
        return True, ''
    try:
        with open(filename, 'rb') as fh:
            sniff = fh.read(len(_gz_signature))
    except OSError:
        return False, f'Could not read file: {filename}'
    if sniff.startswith(_gz_signature):
        return True, ''
    return False, f'File {filename} is not a gzip file'


def load(filename: FileSpec, volume='inmem', slice_rank=None) -> NiftiObject:
    """Load NIfTI-1 object from single file, or detached header

    Parameters
    ----------
    filename : str or os.PathLike
       ``.nii`` or ``.hdr`` file, maybe with ``.gz`` suffix
    volume : {'inmem', 'lazy', 'streamed'}, optional
       Kind of volume to make
    slice_rank : None or int, optional
       Slice rank for a streamed volume

    Returns
    -------
    obj : NiftiObject
    """
    filename = _stringify_path(filename)
    try:
        stat_result = os.stat(filename)
    except OSError:
        raise FileNotFoundError(f"No such file or no access: '{filename}'")
    if stat_result.st_size <= 0:
        raise InvalidFormat(f"Empty file: '{filename}'")
    matches, msg = _signature_matches_extension(filename)
    if not matches:
        raise InvalidFormat(msg)
    return NiftiObject.from_file(filename, volume=volume,
                                 slice_rank=slice_rank)


def load_pair(hdr_filename: FileSpec, img_filename: FileSpec,
              volume='inmem', slice_rank=None) -> NiftiObject:
    """Load NIfTI-1 object from header file and named image file"""
    return NiftiObject.from_file_pair(_stringify_path(hdr_filename),
                                      _stringify_path(img_filename),
                                      volume=volume, slice_rank=slice_rank)


def save(obj: NiftiObject, filename: FileSpec) -> None:
    """Save NIfTI-1 object to single file `filename`

    Parameters
    ----------
    obj : NiftiObject
       Object to save; the volume must not be streamed
    filename : str or os.PathLike
       ``.nii`` or ``.nii.gz`` filename
    """
    filename = _stringify_path(filename)
    root, ext, addext = splitext_addext(filename)
    if ext.lower() != '.nii':
        raise ValueError(f'Cannot save NIfTI-1 single file as {filename!r}; '
                         'use a .nii or .nii.gz extension')
    obj.to_filename(filename)
