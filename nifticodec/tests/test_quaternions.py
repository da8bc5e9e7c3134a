# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Test quaternion calculations"""

import numpy as np
import pytest
from numpy import pi
from numpy.testing import assert_array_almost_equal, assert_array_equal

from .. import quaternions as nq


def _rotation_about(axis, theta):
    # Rotation matrix for right hand rotation of `theta` about unit `axis`
    x, y, z = np.asarray(axis, dtype=np.float64) / np.linalg.norm(axis)
    c, s = np.cos(theta), np.sin(theta)
    C = 1 - c
    return np.array([[x * x * C + c, x * y * C - z * s, x * z * C + y * s],
                     [y * x * C + z * s, y * y * C + c, y * z * C - x * s],
                     [z * x * C - y * s, z * y * C + x * s, z * z * C + c]])


def _quaternion_about(axis, theta):
    axis = np.asarray(axis, dtype=np.float64) / np.linalg.norm(axis)
    return np.r_[np.cos(theta / 2), np.sin(theta / 2) * axis]


ROTATIONS = [(axis, theta)
             for axis in ([1, 0, 0], [0, 1, 0], [0, 0, 1], [1, 1, 0],
                          [0.2, -0.5, 0.8])
             for theta in (0, pi / 6, pi / 2, 2.5, pi - 1e-3)]


def test_fill_positive():
    # Takes sequence
    xyz = [0, 0, 0]
    wxyz = nq.fill_positive(xyz)
    assert_array_equal(wxyz, [1, 0, 0, 0])
    assert wxyz.dtype == np.float64
    # Or array-like
    wxyz = nq.fill_positive(np.array(xyz, dtype=np.float32))
    assert_array_equal(wxyz, [1, 0, 0, 0])
    # Length 3 only
    with pytest.raises(ValueError):
        nq.fill_positive([0, 0])
    with pytest.raises(ValueError):
        nq.fill_positive([0, 0, 0, 0])
    # Unit vector gives w == 0
    assert_array_equal(nq.fill_positive([0, 1, 0]), [0, 0, 1, 0])
    # Too large by more than the threshold
    with pytest.raises(ValueError):
        nq.fill_positive([1, 0.1, 0])
    # Within threshold of 1, from float32 rounding, gives w == 0
    xyz = np.array([0.6, 0.8, 0], dtype=np.float32)
    assert 1 - np.dot(xyz.astype(np.float64), xyz.astype(np.float64)) < 0
    wxyz = nq.fill_positive(xyz)
    assert wxyz[0] == 0
    # Stricter threshold rejects the same values
    with pytest.raises(ValueError):
        nq.fill_positive(xyz, w2_thresh=0)
    # Output is a unit quaternion
    wxyz = nq.fill_positive([0.1, 0.2, 0.3])
    assert_array_almost_equal(np.sum(wxyz ** 2), 1)
    assert wxyz[0] > 0


def test_quaternion_to_affine():
    # Identity and near zero quaternions
    assert_array_equal(nq.quaternion_to_affine([1, 0, 0, 0]), np.eye(3))
    assert_array_equal(nq.quaternion_to_affine([0, 0, 0, 0]), np.eye(3))
    assert_array_equal(nq.quaternion_to_affine([1e-9, 0, 0, 0]), np.eye(3))
    # Non-unit quaternions give the same rotation as unit quaternions
    q = [2, 0, 0, 0]
    assert_array_almost_equal(nq.quaternion_to_affine(q), np.eye(3))
    assert_array_almost_equal(nq.quaternion_to_affine([0, 3, 0, 0]),
                              np.diag([1, -1, -1]))
    for axis, theta in ROTATIONS:
        M = nq.quaternion_to_affine(_quaternion_about(axis, theta))
        assert_array_almost_equal(M, _rotation_about(axis, theta))
        # Orthonormal, with determinant 1
        assert_array_almost_equal(M.dot(M.T), np.eye(3))
        assert_array_almost_equal(np.linalg.det(M), 1)


def test_affine_to_quaternion():
    for axis, theta in ROTATIONS:
        q = nq.affine_to_quaternion(_rotation_about(axis, theta))
        assert q[0] >= 0
        assert_array_almost_equal(q, _quaternion_about(axis, theta))
        assert_array_almost_equal(nq.quaternion_to_affine(q),
                                  _rotation_about(axis, theta))
    # Negative w quaternion flipped to positive
    q = nq.affine_to_quaternion(_rotation_about([0, 0, 1], 1.5 * pi))
    assert q[0] >= 0
    assert_array_almost_equal(nq.quaternion_to_affine(q),
                              _rotation_about([0, 0, 1], 1.5 * pi))


def test_affine_to_quaternion_not_orthonormal():
    # Closest quaternion for a matrix a little away from a rotation
    M = np.array([[1.1, 0.1, 0.1],
                  [0.2, 1.1, 0.5],
                  [0, 0, 1]])
    q = nq.affine_to_quaternion(M)
    assert np.allclose(q, [0.9929998817020889, -0.11474227051531193,
                           0.017766153114299018, 0.02167510323267152],
                       rtol=0, atol=1e-11)
