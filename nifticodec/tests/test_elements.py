# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for the voxel element codec"""

import numpy as np
import pytest
from numpy.testing import assert_array_equal, assert_almost_equal

from ..elements import (data_type_codes, element_codes, element_for_code,
                        element_for_dtype)
from ..errors import UnsupportedDataType
from ..volumeutils import native_code, swapped_code

SUPPORTED = ((2, np.uint8), (4, np.int16), (8, np.int32), (16, np.float32),
             (32, np.complex64), (64, np.float64), (256, np.int8),
             (512, np.uint16), (768, np.uint32), (1024, np.int64),
             (1280, np.uint64), (1792, np.complex128))


def test_lookup():
    for code, np_type in SUPPORTED:
        element = element_for_code(code)
        assert element.code == code
        assert element.dtype == np.dtype(np_type)
        assert element.bitpix == np.dtype(np_type).itemsize * 8
        assert element_for_dtype(np_type) is element
        assert element_for_dtype(np.dtype(np_type).newbyteorder('S')) is element
        assert element_for_code(element.label) is element
        assert element_for_code(data_type_codes.niistring[code]) is element
    assert element_for_code('NIFTI_TYPE_INT16').label == 'int16'
    assert len(element_codes.value_set()) == len(SUPPORTED)


def test_unsupported():
    # Known but not implemented, and not known at all
    for code in (0, 1, 128, 255, 1536, 2048, 2304, 3, 'RGBA', 'foo', None):
        with pytest.raises(UnsupportedDataType):
            element_for_code(code)
    with pytest.raises(UnsupportedDataType) as excinfo:
        element_for_code(128)
    assert excinfo.value.code == 128
    for dtype in (np.bool_, 'V16', 'U3'):
        with pytest.raises(UnsupportedDataType):
            element_for_dtype(dtype)


def test_from_raw():
    i16 = element_for_code(4)
    raw = np.array([1, -2, 300], dtype='<i2').tobytes()
    assert i16.from_raw(raw, '<') == 1
    assert i16.from_raw(raw, '<', offset=2) == -2
    assert i16.from_raw(raw, '<', offset=4) == 300
    assert i16.from_raw(raw, '<').dtype == np.dtype(np.int16)
    # Read with the wrong byte order
    assert i16.from_raw(raw, '>') == 256
    raw_be = np.array([1, -2, 300], dtype='>i2').tobytes()
    assert i16.from_raw(raw_be, 'big', offset=4) == 300
    f64 = element_for_code(64)
    assert f64.from_raw(np.array([0.5], '>f8').tobytes(), '>') == 0.5
    c64 = element_for_code(32)
    raw_c = np.array([1 + 2j], '<c8').tobytes()
    assert c64.from_raw(raw_c, '<') == 1 + 2j


def test_from_raw_many():
    u16 = element_for_code(512)
    values = np.array([1, 2, 65535], dtype=np.uint16)
    raw_sw = values.astype(values.dtype.newbyteorder(swapped_code)).tobytes()
    assert_array_equal(u16.from_raw_many(raw_sw, swapped_code), values)
    assert_array_equal(u16.from_raw_many(values.tobytes(), native_code),
                       values)
    # In place swaps the buffer
    buffer = bytearray(raw_sw)
    arr = u16.from_raw_many_inplace(buffer, swapped_code)
    assert_array_equal(arr, values)
    assert bytes(buffer) == values.tobytes()
    # Native buffer unchanged
    buffer = bytearray(values.tobytes())
    arr = u16.from_raw_many_inplace(buffer, native_code)
    assert bytes(buffer) == values.tobytes()
    assert arr.dtype == np.dtype(np.uint16)


def test_cast():
    u8 = element_for_code('uint8')
    i16 = element_for_code('int16')
    f32 = element_for_code('float32')
    c64 = element_for_code('complex64')
    # Float to int truncates toward zero, saturates, NaN to 0
    assert_array_equal(u8.cast_many([1.7, -3.2, 300.0, np.nan]),
                       [1, 0, 255, 0])
    assert_array_equal(i16.cast_many([-1.7, 40000.0, -40000.0]),
                       [-1, 32767, -32768])
    assert u8.cast_many([1.7]).dtype == np.dtype(np.uint8)
    # Complex to real keeps the real part
    assert f32.cast(np.complex64(2 + 3j)) == 2.0
    assert i16.cast(np.complex128(-5.5 + 1j)) == -5
    # Real to complex
    assert c64.cast(np.float64(1.5)) == 1.5 + 0j
    # Same type, no change
    arr = np.arange(3, dtype=np.int16)
    assert i16.cast_many(arr) is arr


def test_linear_transform():
    u8 = element_for_code(2)
    assert u8.linear_transform(14, 1, -5) == 9
    assert u8.linear_transform(14, 2, 0) == 28
    # Result saturates to the type
    assert u8.linear_transform(200, 2, 0) == 255
    assert u8.linear_transform(3, 1, -5) == 0
    # slope of 0 means no scaling, whatever the intercept
    assert u8.linear_transform(14, 0, -5) == 14
    f64 = element_for_code(64)
    assert_almost_equal(f64.linear_transform(3, 0.5, 1.25), 2.75)
    assert f64.linear_transform(3, 0, 100) == 3.0
    i16 = element_for_code(4)
    assert_array_equal(i16.linear_transform_many([1, 2, 3], 2, -1), [1, 3, 5])
    # Arithmetic in the element type
    f32 = element_for_code(16)
    out = f32.linear_transform_many(np.array([1, 2], dtype=np.uint8), 0.1, 0)
    assert out.dtype == np.dtype(np.float32)
    assert_array_equal(out, np.array([1, 2], np.float32) * np.float32(0.1))
    c128 = element_for_code(1792)
    assert c128.linear_transform(1 + 1j, 2, 1) == 3 + 2j
