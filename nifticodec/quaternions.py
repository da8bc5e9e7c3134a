# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Quaternion rotations for the NIfTI-1 qform

The qform stores a unit quaternion ``(w, x, y, z)`` as its last three
components only (``quatern_b``, ``quatern_c``, ``quatern_d``), assuming ``w``
is non-negative.  Quaternions here are 4 element sequences ordered
``w, x, y, z``.  Rotation matrices are (3, 3) arrays that act on column
vectors on their right.

The :func:`affine_to_quaternion` method is from:

Bar-Itzhack, Itzhack Y. "New method for extracting the quaternion from a
rotation matrix", AIAA Journal of Guidance, Control and Dynamics
23(6):1085-1087, 2000
"""

import numpy as np

_FLOAT_EPS = np.finfo(np.float64).eps

#: Lowest acceptable value of ``w**2`` when filling ``w``
QUATERNION_THRESHOLD = -np.finfo(np.float32).eps * 3


def fill_positive(xyz, w2_thresh=None):
    """Compute unit quaternion from last 3 values

    Parameters
    ----------
    xyz : iterable
       iterable containing 3 values, corresponding to quaternion x, y, z
    w2_thresh : None or float, optional
       threshold below which a negative ``w**2`` is an error.  None means
       :data:`QUATERNION_THRESHOLD`, which suits values stored as float32.

    Returns
    -------
    wxyz : array shape (4,)
         Full 4 values of quaternion, in float64

    Raises
    ------
    ValueError
       If ``1 - (x*x + y*y + z*z)`` is below `w2_thresh`

    Notes
    -----
    If w, x, y, z are the values in the full quaternion, assumes w is
    positive, so that ``w = np.sqrt(1.0 - (x*x + y*y + z*z))``.
    ``w = 0`` corresponds to a 180 degree rotation.  Small negative values of
    ``w**2`` from float32 rounding give ``w = 0``.

    Examples
    --------
    >>> wxyz = fill_positive([0, 0, 0])
    >>> wxyz
    array([1., 0., 0., 0.])
    >>> fill_positive([1, 0, 0])
    array([0., 1., 0., 0.])
    >>> fill_positive([1, 0.1, 0])
    Traceback (most recent call last):
       ...
    ValueError: w2 should be positive, but is -0.010000000000000009
    """
    if w2_thresh is None:
        w2_thresh = QUATERNION_THRESHOLD
    if len(xyz) != 3:
        raise ValueError('xyz should have length 3')
    xyz = np.asarray(xyz, dtype=np.float64)
    w2 = 1.0 - np.dot(xyz, xyz)
    if w2 < 0:
        if w2 < w2_thresh:
            raise ValueError(f'w2 should be positive, but is {w2}')
        w = 0
    else:
        w = np.sqrt(w2)
    return np.r_[w, xyz]


def quaternion_to_affine(q):
    """Calculate rotation matrix corresponding to quaternion

    Parameters
    ----------
    q : 4 element array-like
       quaternion ``w, x, y, z``; need not be normalized

    Returns
    -------
    M : (3, 3) array
       Rotation matrix.  The identity when `q` has (near) zero norm.

    Examples
    --------
    >>> M = quaternion_to_affine([1, 0, 0, 0]) # Identity quaternion
    >>> np.allclose(M, np.eye(3))
    True
    >>> M = quaternion_to_affine([0, 1, 0, 0]) # 180 degree rotn around axis 0
    >>> np.allclose(M, np.diag([1, -1, -1]))
    True
    >>> np.all(quaternion_to_affine([0, 0, 0, 0]) == np.eye(3))
    True
    """
    w, x, y, z = q
    Nq = w * w + x * x + y * y + z * z
    if Nq < _FLOAT_EPS:
        return np.eye(3)
    s = 2.0 / Nq
    X = x * s
    Y = y * s
    Z = z * s
    wX = w * X
    wY = w * Y
    wZ = w * Z
    xX = x * X
    xY = x * Y
    xZ = x * Z
    yY = y * Y
    yZ = y * Z
    zZ = z * Z
    return np.array([[1.0 - (yY + zZ), xY - wZ, xZ + wY],
                     [xY + wZ, 1.0 - (xX + zZ), yZ - wX],
                     [xZ - wY, yZ + wX, 1.0 - (xX + yY)]])


def affine_to_quaternion(M):
    """Calculate quaternion corresponding to given rotation matrix

    Parameters
    ----------
    M : array-like
      3x3 rotation matrix

    Returns
    -------
    q : (4,) array
      closest quaternion to input matrix, having non-negative ``q[0]``

    Notes
    -----
    Builds the symmetric matrix ``K`` from `M` and takes the eigenvector of
    its largest eigenvalue, which is robust to small departures of `M` from
    an orthonormal matrix.  A maximum eigenvalue of 1 corresponds to a valid
    rotation.

    A quaternion ``q*-1`` corresponds to the same rotation as ``q``; we
    return the quaternion with non-negative ``w``.

    Examples
    --------
    >>> q = affine_to_quaternion(np.eye(3)) # Identity rotation
    >>> np.allclose(q, [1, 0, 0, 0])
    True
    >>> q = affine_to_quaternion(np.diag([1, -1, -1]))
    >>> np.allclose(q, [0, 1, 0, 0]) # 180 degree rotn around axis 0
    True
    """
    # Qyx refers to the contribution of the y input vector component to
    # the x output vector component.  Qyx is therefore the same as
    # M[0,1].
    Qxx, Qyx, Qzx, Qxy, Qyy, Qzy, Qxz, Qyz, Qzz = np.asarray(M).flat
    # Fill only lower half of symmetric matrix
    K = np.array([
        [Qxx - Qyy - Qzz, 0, 0, 0],
        [Qyx + Qxy, Qyy - Qxx - Qzz, 0, 0],
        [Qzx + Qxz, Qzy + Qyz, Qzz - Qxx - Qyy, 0],
        [Qyz - Qzy, Qzx - Qxz, Qxy - Qyx, Qxx + Qyy + Qzz]]
    ) / 3.0
    # eigh reads the lower triangle by default
    vals, vecs = np.linalg.eigh(K)
    # Select largest eigenvector, reorder to w,x,y,z quaternion
    q = vecs[[3, 0, 1, 2], np.argmax(vals)]
    if q[0] < 0:
        q *= -1
    return q
