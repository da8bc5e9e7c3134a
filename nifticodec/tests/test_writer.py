# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for writing single file images"""
import gzip
from io import BytesIO

import numpy as np
import pytest
from numpy.testing import assert_almost_equal, assert_array_equal

from ..errors import HeaderDataError, UnsupportedDataType
from ..nifti1 import Nifti1Extension, Nifti1Header
from ..writer import header_for_data, write_data, write_header, write_nifti


def _read_back(contents, dtype, shape, offset=352):
    return np.frombuffer(contents[offset:], dtype=dtype).reshape(shape,
                                                                 order='F')


def test_header_for_data():
    data = np.zeros((2, 3, 4), dtype=np.int16)
    hdr = header_for_data(data)
    assert hdr.endianness == '<'
    assert hdr.get_data_shape() == (2, 3, 4)
    assert int(hdr['datatype']) == 4
    assert int(hdr['bitpix']) == 16
    assert hdr['magic'] == b'n+1'
    assert hdr.get_vox_offset() == 352
    # Shape and type always come from the data
    ref = Nifti1Header()
    ref.set_data_shape((10, 10))
    ref.set_data_dtype(np.float64)
    ref.set_zooms((2, 3))
    ref['descrip'] = b'reference'
    hdr = header_for_data(data, ref)
    assert hdr.get_data_shape() == (2, 3, 4)
    assert hdr.get_data_type().label == 'int16'
    assert hdr['descrip'] == b'reference'
    assert hdr.get_zooms()[:2] == (2.0, 3.0)
    # The reference is unchanged
    assert ref.get_data_shape() == (10, 10)


def test_header_for_data_swapped():
    ref = Nifti1Header(endianness='>')
    ref.set_data_dtype(np.uint8)
    ref['magic'] = b'ni1'
    ref['vox_offset'] = 0
    hdr = header_for_data(np.zeros(3, dtype='>f4'), ref)
    assert hdr.endianness == '<'
    assert hdr.is_single_file()
    assert hdr.get_vox_offset() == 352
    assert hdr.get_data_type().label == 'float32'


def test_header_for_data_extensions():
    ref = Nifti1Header()
    ref.extensions.append(Nifti1Extension('comment', b'a' * 9))
    ref.extensions.append(Nifti1Extension('afni', b'<xml/>'))
    hdr = header_for_data(np.zeros(3, dtype=np.uint8), ref)
    assert len(hdr.extensions) == 2
    assert hdr.get_vox_offset() == 352 + 32 + 16


def test_write_nifti_layout():
    data = np.arange(6, dtype=np.int16).reshape((2, 3))
    bio = BytesIO()
    write_nifti(bio, data)
    contents = bio.getvalue()
    assert len(contents) == 352 + 12
    # sizeof_hdr, little-endian
    assert contents[:4] == b'\x5c\x01\x00\x00'
    assert contents[344:348] == b'n+1\x00'
    # no extensions
    assert contents[348:352] == b'\x00' * 4
    assert_array_equal(_read_back(contents, '<i2', (2, 3)), data)
    hdr = Nifti1Header.from_fileobj(BytesIO(contents))
    assert hdr.endianness == '<'
    assert hdr.get_data_shape() == (2, 3)
    assert hdr.get_data_type().label == 'int16'


def test_write_extensions():
    ref = Nifti1Header()
    ext = Nifti1Extension('comment', b'some text')
    ref.extensions.append(ext)
    bio = BytesIO()
    write_nifti(bio, np.ones(2, dtype=np.float32), ref)
    contents = bio.getvalue()
    assert len(contents) == 352 + 32 + 8
    assert contents[348:352] == b'\x01\x00\x00\x00'
    assert_array_equal(_read_back(contents, '<f4', (2,), 384), [1, 1])
    hdr = Nifti1Header.from_fileobj(BytesIO(contents))
    assert hdr.get_vox_offset() == 384
    assert hdr.extensions == [ext]


def test_write_scaled():
    ref = Nifti1Header()
    ref.set_slope_inter(2, 10)
    data = np.array([10, 12, 20, 11], dtype=np.float32)
    bio = BytesIO()
    write_nifti(bio, data, ref)
    contents = bio.getvalue()
    assert_array_equal(_read_back(contents, '<f4', (4,)), [0, 1, 5, 0.5])
    hdr = Nifti1Header.from_fileobj(BytesIO(contents))
    assert hdr.get_slope_inter() == (2.0, 10.0)
    # Integers saturate after scaling
    ref.set_slope_inter(1, -200)
    bio = BytesIO()
    write_nifti(bio, np.array([0, 100], dtype=np.uint8), ref)
    assert_array_equal(_read_back(bio.getvalue(), 'u1', (2,)), [200, 255])
    # slope of 0 counts as 1; intercept still applies
    ref.set_slope_inter(0, 5)
    bio = BytesIO()
    write_nifti(bio, np.array([5, 6], dtype=np.int16), ref)
    assert_array_equal(_read_back(bio.getvalue(), '<i2', (2,)), [0, 1])
    # already stored values
    ref.set_slope_inter(2, 10)
    bio = BytesIO()
    write_nifti(bio, np.array([5, 6], dtype=np.int16), ref, scaled=False)
    assert_array_equal(_read_back(bio.getvalue(), '<i2', (2,)), [5, 6])


def test_write_parts():
    data = np.arange(4, dtype=np.float64).reshape((2, 2))
    hdr = header_for_data(data)
    bio = BytesIO()
    write_header(bio, hdr)
    assert bio.tell() == 352
    write_data(bio, hdr, data)
    assert_almost_equal(_read_back(bio.getvalue(), '<f8', (2, 2)), data)
    # column-major on disk
    assert_array_equal(np.frombuffer(bio.getvalue()[352:], '<f8'),
                       [0, 2, 1, 3])
    # Big-endian headers get big-endian data
    bhdr = hdr.as_byteswapped('>')
    bio = BytesIO()
    write_data(bio, bhdr, data)
    assert_array_equal(np.frombuffer(bio.getvalue(), '>f8'), [0, 2, 1, 3])


def test_write_errors():
    with pytest.raises(HeaderDataError):
        write_nifti(BytesIO(), np.zeros((1,) * 8, dtype=np.uint8))
    with pytest.raises(UnsupportedDataType):
        write_nifti(BytesIO(), np.zeros(2, dtype=np.float16))


def test_write_gz(tmp_path):
    data = np.arange(24, dtype=np.int32).reshape((2, 3, 4))
    fname = tmp_path / 'out.nii.gz'
    write_nifti(fname, data)
    with gzip.open(fname, 'rb') as fobj:
        contents = fobj.read()
    assert_array_equal(_read_back(contents, '<i4', (2, 3, 4)), data)
    fname = tmp_path / 'out.nii'
    write_nifti(str(fname), data)
    assert fname.read_bytes() == contents
