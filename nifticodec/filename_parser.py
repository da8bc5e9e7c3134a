# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Filenames for NIfTI-1 files and header / image pairs"""
from __future__ import annotations

import os
import pathlib
import typing as ty

if ty.TYPE_CHECKING:  # pragma: no cover
    FileSpec = str | os.PathLike[str]

#: Suffixes for compressed files, outside the format extension
compressed_suffixes = ('.gz',)


def _stringify_path(filepath: FileSpec) -> str:
    """Convert a path-like object to a string, expanding ``~``"""
    return pathlib.Path(filepath).expanduser().as_posix()


def _iendswith(whole: str, end: str) -> bool:
    return whole.lower().endswith(end.lower())


def splitext_addext(
    filename: FileSpec,
    addexts: ty.Sequence[str] = compressed_suffixes,
) -> tuple[str, str, str]:
    """Split ``/pth/fname.ext.gz`` into ``/pth/fname, .ext, .gz``

    where ``.gz`` may be any of passed `addexts` trailing suffixes, matched
    case-insensitively.

    Returns
    -------
    froot : str
       Root of filename - e.g. ``/pth/fname`` in example above
    ext : str
       Extension, where extension is not in `addexts` - e.g. ``.ext`` in
       example above
    addext : str
       Any suffixes appearing in `addext` occurring at end of filename

    Examples
    --------
    >>> splitext_addext('fname.nii.gz')
    ('fname', '.nii', '.gz')
    >>> splitext_addext('fname.hdr')
    ('fname', '.hdr', '')
    >>> splitext_addext('.nii')
    ('.nii', '', '')
    """
    filename = _stringify_path(filename)
    for ext in addexts:
        if _iendswith(filename, ext):
            extpos = -len(ext)
            filename, addext = filename[:extpos], filename[extpos:]
            break
    else:
        addext = ''
    # os.path.splitext() behaves unexpectedly when filename starts with '.'
    extpos = filename.rfind('.')
    if extpos < 0 or filename.strip('.') == '' or \
            extpos < filename.rfind('/') + 2:
        root, ext = filename, ''
    else:
        root, ext = filename[:extpos], filename[extpos:]
    return (root, ext, addext)


def is_gz_file(filename: FileSpec) -> bool:
    """True if `filename` ends in ``.gz``, in any case

    >>> is_gz_file('/data/T1.nii.GZ')
    True
    >>> is_gz_file('/data/T1.nii')
    False
    """
    return splitext_addext(filename)[2] != ''


def img_filenames_for(header_fname: FileSpec) -> list[str]:
    """Candidate image filenames for a detached header, in search order

    The compressed image comes first, then the plain one, whatever the
    compression of the header file itself.

    >>> img_filenames_for('/data/T1.hdr')
    ['/data/T1.img.gz', '/data/T1.img']
    >>> img_filenames_for('/data/T1.hdr.gz')
    ['/data/T1.img.gz', '/data/T1.img']
    """
    root, _, _ = splitext_addext(header_fname)
    return [root + '.img.gz', root + '.img']
