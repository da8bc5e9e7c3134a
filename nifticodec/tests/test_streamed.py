# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for slice by slice reading"""
from io import BytesIO

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from ..errors import AxisOutOfBounds, NiftiIOError
from ..nifti1 import Nifti1Header
from ..openers import Opener
from ..shape import Dim
from ..streamed import StreamedNiftiVolume

RAW_ODD = bytes(range(1, 24, 2))


def _vol(**kwargs):
    return StreamedNiftiVolume(BytesIO(RAW_ODD), (2, 3, 2), 'uint8', **kwargs)


def test_read_slices():
    vol = _vol()
    assert vol.dim == Dim.from_sequence((2, 3, 2))
    assert vol.slice_dim == Dim.from_sequence((2, 3))
    assert vol.slice_rank == 2
    assert (vol.slices_read, vol.slices_left) == (0, 2)
    first = vol.read_slice()
    assert first.shape == (2, 3)
    assert_array_equal(first.get_data(np.uint8),
                       [[1, 5, 9], [3, 7, 11]])
    assert (vol.slices_read, vol.slices_left) == (1, 1)
    second = vol.read_slice()
    assert_array_equal(second.get_data(np.uint8),
                       [[13, 17, 21], [15, 19, 23]])
    assert (vol.slices_read, vol.slices_left) == (2, 0)
    # Exhausted volumes return None, as many times as asked
    assert vol.read_slice() is None
    assert vol.read_slice() is None
    assert vol.slices_read == 2


def test_scaling():
    vol = _vol(slope=2, inter=-1)
    sl = vol.read_slice()
    assert sl.get_f32((1, 2)) == 21.0
    assert (sl.scl_slope, sl.scl_inter) == (2.0, -1.0)


def test_slice_rank():
    vol = _vol(slice_rank=1)
    assert vol.slice_dim.shape == (2,)
    assert vol.slices_left == 6
    values = [tuple(sl.get_data(np.uint8)) for sl in vol]
    assert values == [(1, 3), (5, 7), (9, 11), (13, 15), (17, 19), (21, 23)]
    vol = StreamedNiftiVolume(BytesIO(bytes(24)), (2, 3, 4), 'uint8')
    assert vol.with_slice_rank(1) is vol
    assert vol.slices_left == 12
    assert vol.with_slice_rank(2).slices_left == 4
    with pytest.raises(AxisOutOfBounds):
        vol.with_slice_rank(3)
    with pytest.raises(AxisOutOfBounds):
        vol.with_slice_rank(0)
    vol.read_slice()
    with pytest.raises(ValueError):
        vol.with_slice_rank(1)


def test_rank1():
    # A single axis cannot be cut into slices
    with pytest.raises(AxisOutOfBounds):
        StreamedNiftiVolume(BytesIO(bytes(4)), (4,), 'uint8')


def test_iteration():
    slices = list(_vol())
    assert len(slices) == 2
    assert slices[1].get_u8((0, 0)) == 13
    vol = _vol()
    vol.read_slice()
    assert len(list(vol)) == 1


def test_inplace():
    vol = _vol()
    buffer = bytearray(b'rubbish left in buffer')
    first = vol.read_slice_inplace(buffer)
    assert len(buffer) == 6
    assert bytes(buffer) == RAW_ODD[:6]
    assert first.get_u8((1, 2)) == 11
    second = vol.next_inplace(buffer)
    assert second.get_u8((0, 0)) == 13
    # The slices share the buffer
    assert first.get_u8((0, 0)) == 13
    assert vol.read_slice_inplace(buffer) is None
    assert bytes(buffer) == RAW_ODD[6:]


def test_indexed():
    vol = _vol(slice_rank=1)
    pairs = [(idx, sl.get_u8((1,))) for idx, sl in vol.indexed()]
    assert pairs == [((0, 0), 3), ((1, 0), 7), ((2, 0), 11),
                     ((0, 1), 15), ((1, 1), 19), ((2, 1), 23)]
    # Indices continue from slices already read
    vol = _vol(slice_rank=1)
    vol.read_slice()
    vol.read_slice()
    idx, sl = next(vol.indexed())
    assert idx == (2, 0)
    assert sl.get_u8((0,)) == 9


def test_truncated():
    vol = StreamedNiftiVolume(BytesIO(RAW_ODD[:9]), (2, 3, 2), 'uint8')
    vol.read_slice()
    with pytest.raises(NiftiIOError):
        vol.read_slice()


def test_byte_order():
    data = np.arange(6, dtype='>i2')
    vol = StreamedNiftiVolume(BytesIO(data.tobytes()), (3, 2), 'int16',
                              endianness='>')
    assert [sl.get_i16((2,)) for sl in vol] == [2, 5]


def test_from_fileobj():
    hdr = Nifti1Header()
    hdr.set_data_shape((2, 3, 2))
    hdr.set_data_dtype(np.uint8)
    hdr.set_slope_inter(1, 1)
    bio = BytesIO(bytes(4) + RAW_ODD)
    bio.read(2)
    vol = StreamedNiftiVolume.from_fileobj(bio, hdr, offset=4)
    assert vol.read_slice().get_u8((0, 0)) == 2
    bio = BytesIO(RAW_ODD)
    vol = StreamedNiftiVolume.from_fileobj(bio, hdr, slice_rank=1)
    assert vol.slices_left == 6


def test_close(tmp_path):
    fname = tmp_path / 'data.bin'
    fname.write_bytes(RAW_ODD)
    opener = Opener(fname)
    with StreamedNiftiVolume(opener, (2, 3, 2), 'uint8') as vol:
        vol.read_slice()
    assert opener.closed
    # File objects we did not open stay open
    bio = BytesIO(RAW_ODD)
    with StreamedNiftiVolume(Opener(bio), (2, 3, 2), 'uint8'):
        pass
    assert not bio.closed
    bio = BytesIO(RAW_ODD)
    StreamedNiftiVolume(bio, (2, 3, 2), 'uint8').close()
    assert not bio.closed
