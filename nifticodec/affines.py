# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Utility routines for working with points and affine transforms

Affines are (N+1, N+1) arrays in homogeneous coordinates.  They act on
column vectors to their right, so the translation is the last *column*, and
the last row is ``[0, ..., 0, 1]``.
"""

import numpy as np

from .errors import HeaderDataError


class AffineError(HeaderDataError):
    """Errors in calculating or using affines"""


def get_affine_and_translation(affine):
    """Split (4, 4) `affine` into (3, 3) linear part and translation

    The translation is read from the fourth column.

    Examples
    --------
    >>> aff = np.diag([2, 3, 4, 1])
    >>> aff[:3, 3] = [9, 10, 11]
    >>> mat, trans = get_affine_and_translation(aff)
    >>> mat
    array([[2, 0, 0],
           [0, 3, 0],
           [0, 0, 4]])
    >>> trans
    array([ 9, 10, 11])
    """
    affine = np.asarray(affine)
    if affine.shape != (4, 4):
        raise AffineError(f'Need 4x4 affine, got shape {affine.shape}')
    return affine[:3, :3], affine[:3, 3]


def from_matvec(matrix, vector=None):
    """Combine a matrix and vector into an homogeneous affine

    Parameters
    ----------
    matrix : array-like
        An NxM array representing the the linear part of the transform.
    vector : None or array-like, optional
        None or an (N,) array representing the translation. None corresponds to
        an (N,) array of zeros.

    Returns
    -------
    xform : array
        An (N+1, M+1) homogenous transform matrix.

    Examples
    --------
    >>> from_matvec(np.diag([2, 3, 4]), [9, 10, 11])
    array([[ 2,  0,  0,  9],
           [ 0,  3,  0, 10],
           [ 0,  0,  4, 11],
           [ 0,  0,  0,  1]])
    """
    matrix = np.asarray(matrix)
    nin, nout = matrix.shape
    t = np.zeros((nin + 1, nout + 1), matrix.dtype)
    t[0:nin, 0:nout] = matrix
    t[nin, nout] = 1
    if vector is not None:
        t[0:nin, nout] = vector
    return t


def apply_affine(aff, pts):
    """Apply affine matrix `aff` to points `pts`

    The coordinate dimension of `pts` should be the last.  For voxel
    coordinates ``(i, j, k)`` and a (4, 4) `aff`, the result is the
    corresponding position in millimeters.

    Examples
    --------
    >>> aff = from_matvec(np.diag([2, 3, 4]), [10, 11, 12])
    >>> apply_affine(aff, [[1, 1, 1], [0, 2, 3]])
    array([[12, 14, 16],
           [10, 17, 24]])
    """
    aff = np.asarray(aff)
    pts = np.asarray(pts)
    shape = pts.shape
    pts = pts.reshape((-1, shape[-1]))
    # rzs == rotations, zooms, shears
    rzs = aff[:-1, :-1]
    trans = aff[:-1, -1]
    res = np.dot(pts, rzs.T) + trans[None, :]
    return res.reshape(shape)


def shape_zoom_affine(shape, zooms, x_flip=True):
    """Get affine implied by given shape and zooms

    We get the translations from the center of the image (implied by
    `shape`), where the center of an axis with `n` voxels is ``(n - 1) / 2``.
    Shapes and zooms with fewer than 3 values are padded with 1.

    Parameters
    ----------
    shape : (N,) array-like
       shape of image data. ``N`` is the number of dimensions
    zooms : (N,) array-like
       zooms (voxel sizes) of the image
    x_flip : {True, False}
       whether to flip the X row of the affine.  Corresponds to
       radiological storage on disk, and is the NIfTI-1 default.

    Returns
    -------
    aff : (4,4) array
       affine giving correspondance of voxel coordinates to mm
       coordinates, taking the center of the image as origin

    Examples
    --------
    >>> shape_zoom_affine((3, 5, 7), (3, 2, 1))
    array([[-3.,  0.,  0.,  3.],
           [ 0.,  2.,  0., -4.],
           [ 0.,  0.,  1., -3.],
           [ 0.,  0.,  0.,  1.]])
    >>> shape_zoom_affine((3, 5, 7), (3, 2, 1), False)
    array([[ 3.,  0.,  0., -3.],
           [ 0.,  2.,  0., -4.],
           [ 0.,  0.,  1., -3.],
           [ 0.,  0.,  0.,  1.]])
    """
    shape = np.asarray(shape, dtype=np.float64)
    zooms = np.array(zooms, dtype=np.float64)
    ndims = len(shape)
    if ndims != len(zooms):
        raise AffineError('Should be same length of zooms and shape')
    full_shape = np.ones((3,))
    full_zooms = np.ones((3,))
    n = min(ndims, 3)
    full_shape[:n] = shape[:n]
    full_zooms[:n] = zooms[:n]
    if x_flip:
        full_zooms[0] *= -1
    origin = (full_shape - 1) / 2.0
    aff = np.eye(4)
    aff[:3, :3] = np.diag(full_zooms)
    aff[:3, -1] = -origin * full_zooms
    return aff
