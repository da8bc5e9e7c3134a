# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for NIfTI-1 objects"""
from io import BytesIO

import numpy as np
import pytest
from numpy.testing import assert_almost_equal, assert_array_equal

from ..arrayproxy import LazyNiftiVolume
from ..errors import InvalidFormat, MissingVolumeFile, NoVolumeData
from ..image import NiftiObject
from ..nifti1 import Nifti1Extension, Nifti1Header
from ..openers import Opener
from ..streamed import StreamedNiftiVolume
from ..volume import InMemNiftiVolume
from ..writer import header_for_data, write_nifti

DATA = np.arange(24, dtype=np.int16).reshape((2, 3, 4))


def _single_bytes(data=DATA, reference=None):
    bio = BytesIO()
    write_nifti(bio, data, reference)
    return bio.getvalue()


def _write_pair(hdr_fname, img_fname, data=DATA, vox_offset=0):
    hdr = header_for_data(data)
    hdr['magic'] = b'ni1'
    hdr['vox_offset'] = vox_offset
    with Opener(hdr_fname, 'wb') as fobj:
        hdr.write_to(fobj)
    with Opener(img_fname, 'wb') as fobj:
        fobj.write(b'\x00' * vox_offset)
        fobj.write(data.astype('<i2').tobytes(order='F'))


def test_from_fileobj():
    obj = NiftiObject.from_fileobj(BytesIO(_single_bytes()))
    assert obj.shape == (2, 3, 4)
    assert isinstance(obj.volume, InMemNiftiVolume)
    assert_array_equal(obj.get_data(), DATA)
    assert obj.get_data().dtype == np.float64
    assert obj.get_data(np.int16).dtype == np.int16
    assert obj.volume.get_i16((1, 2, 3)) == 23
    assert len(obj.extensions) == 0
    hdr, exts, vol = obj.into_parts()
    assert hdr is obj.header
    assert vol is obj.volume


def test_volume_kinds():
    contents = _single_bytes()
    obj = NiftiObject.from_fileobj(BytesIO(contents), volume='lazy')
    assert isinstance(obj.volume, LazyNiftiVolume)
    assert not obj.volume.is_loaded
    assert_array_equal(obj.get_data(np.int16), DATA)
    obj = NiftiObject.from_fileobj(BytesIO(contents), volume='streamed')
    assert isinstance(obj.volume, StreamedNiftiVolume)
    assert obj.volume.slices_left == 4
    slices = list(obj.volume)
    assert_array_equal(slices[3].get_data(np.int16), DATA[..., 3])
    obj = NiftiObject.from_fileobj(BytesIO(contents), volume='streamed',
                                   slice_rank=1)
    assert obj.volume.slices_left == 12
    with pytest.raises(ValueError):
        NiftiObject.from_fileobj(BytesIO(contents), volume='mmap')


def test_extensions():
    ref = Nifti1Header()
    ext = Nifti1Extension('comment', b'extended comment')
    ref.extensions.append(ext)
    contents = _single_bytes(reference=ref)
    obj = NiftiObject.from_fileobj(BytesIO(contents))
    assert obj.extensions == [ext]
    assert obj.header.get_vox_offset() == 384
    assert_array_equal(obj.get_data(), DATA)


def test_short_vox_offset():
    # vox_offset of 0 in a single file; data follow the header
    contents = bytearray(_single_bytes())
    hdr = Nifti1Header.from_fileobj(BytesIO(contents))
    hdr['vox_offset'] = 0
    contents[:348] = hdr.binaryblock
    obj = NiftiObject.from_fileobj(BytesIO(bytes(contents)))
    assert_array_equal(obj.get_data(), DATA)


def test_scaled():
    ref = Nifti1Header()
    ref.set_slope_inter(0.5, 10)
    data = np.arange(6, dtype=np.int16).reshape((2, 3))
    bio = BytesIO()
    write_nifti(bio, data, ref, scaled=False)
    obj = NiftiObject.from_fileobj(BytesIO(bio.getvalue()))
    assert_almost_equal(obj.get_data(), data * 0.5 + 10)
    assert obj.volume.get_f32((1, 2)) == 12.5


def test_big_endian():
    ref = Nifti1Header(endianness='>')
    ref.set_data_shape(DATA.shape)
    ref.set_data_dtype(np.int16)
    bio = BytesIO()
    ref.write_to(bio)
    bio.write(DATA.astype('>i2').tobytes(order='F'))
    obj = NiftiObject.from_fileobj(BytesIO(bio.getvalue()))
    assert obj.header.endianness == '>'
    assert obj.volume.endianness == '>'
    assert_array_equal(obj.get_data(np.int16), DATA)


def test_errors():
    contents = _single_bytes()
    bad = contents[:344] + b'xyz\x00' + contents[348:]
    with pytest.raises(InvalidFormat):
        NiftiObject.from_fileobj(BytesIO(bad))
    pair = contents[:344] + b'ni1\x00' + contents[348:]
    with pytest.raises(NoVolumeData):
        NiftiObject.from_fileobj(BytesIO(pair))


def test_from_file(tmp_path):
    for fname in ('test.nii', 'test.nii.gz'):
        path = tmp_path / fname
        write_nifti(path, DATA)
        for kind in ('inmem', 'lazy'):
            obj = NiftiObject.from_file(path, volume=kind)
            assert obj.shape == (2, 3, 4)
            assert_array_equal(obj.get_data(), DATA)
        with NiftiObject.from_file(path, volume='streamed') as obj:
            slices = [sl.get_data() for sl in obj.volume]
        assert_array_equal(np.stack(slices, axis=-1), DATA)
        obj = NiftiObject.from_file(str(path), volume='lazy')
        assert obj.volume.file_like == str(path)


def test_pair(tmp_path):
    hdr_fname = tmp_path / 'test.hdr'
    img_fname = tmp_path / 'test.img'
    _write_pair(hdr_fname, img_fname)
    obj = NiftiObject.from_file(hdr_fname)
    assert not obj.header.is_single_file()
    assert_array_equal(obj.get_data(), DATA)
    obj = NiftiObject.from_file(hdr_fname, volume='lazy')
    assert obj.volume.file_like == str(img_fname)
    assert_array_equal(obj.get_data(), DATA)
    with NiftiObject.from_file(hdr_fname, volume='streamed') as obj:
        assert obj.volume.read_slice().get_i16((1, 2)) == DATA[1, 2, 0]
    # Compressed image comes first
    gz_img = tmp_path / 'test.img.gz'
    _write_pair(tmp_path / 'ignored.hdr', gz_img, DATA * 2)
    obj = NiftiObject.from_file(hdr_fname)
    assert_array_equal(obj.get_data(), DATA * 2)
    # A compressed header finds the same image files
    _write_pair(tmp_path / 'other.hdr.gz', tmp_path / 'other.img')
    obj = NiftiObject.from_file(tmp_path / 'other.hdr.gz')
    assert_array_equal(obj.get_data(), DATA)


def test_missing_image(tmp_path):
    hdr_fname = tmp_path / 'test.hdr'
    _write_pair(hdr_fname, tmp_path / 'elsewhere.img')
    with pytest.raises(MissingVolumeFile):
        NiftiObject.from_file(hdr_fname)
    with pytest.raises(IOError):
        NiftiObject.from_file(hdr_fname)


def test_from_file_pair(tmp_path):
    hdr_fname = tmp_path / 'a.hdr'
    img_fname = tmp_path / 'b.dat'
    _write_pair(hdr_fname, img_fname, vox_offset=16)
    for kind in ('inmem', 'lazy'):
        obj = NiftiObject.from_file_pair(hdr_fname, img_fname, volume=kind)
        assert obj.header.get_vox_offset() == 16
        assert_array_equal(obj.get_data(), DATA)
    # File objects work too
    with open(img_fname, 'rb') as fobj:
        obj = NiftiObject.from_file_pair(hdr_fname, fobj)
        assert not fobj.closed
    assert_array_equal(obj.get_data(), DATA)


def test_affine():
    ref = Nifti1Header()
    aff = np.diag([2., 3., 4., 1.])
    aff[:3, 3] = [-10, 20, 5]
    ref.set_sform(aff)
    obj = NiftiObject.from_fileobj(BytesIO(_single_bytes(reference=ref)))
    assert_almost_equal(obj.affine, aff)


def test_to_filename(tmp_path):
    ref = Nifti1Header()
    ref.set_slope_inter(0.5, 1)
    ref['descrip'] = b'round trip'
    ref.extensions.append(Nifti1Extension('comment', b'kept'))
    bio = BytesIO()
    write_nifti(bio, DATA, ref, scaled=False)
    obj = NiftiObject.from_fileobj(BytesIO(bio.getvalue()))
    out = tmp_path / 'out.nii.gz'
    obj.to_filename(out)
    back = NiftiObject.from_file(out)
    assert back.header['descrip'] == b'round trip'
    assert back.header.get_slope_inter() == (0.5, 1.0)
    assert back.extensions == obj.extensions
    assert_array_equal(back.volume.get_unscaled(), DATA)
    assert_almost_equal(back.get_data(), DATA * 0.5 + 1)
    # Big-endian objects are written little-endian
    obj = NiftiObject(ref.as_byteswapped('>'), None,
                      InMemNiftiVolume(DATA.shape, 'int16',
                                       DATA.astype('>i2').tobytes(order='F'),
                                       endianness='>'))
    obj.to_filename(tmp_path / 'le.nii')
    back = NiftiObject.from_file(tmp_path / 'le.nii')
    assert back.header.endianness == '<'
    assert_array_equal(back.volume.get_unscaled(), DATA)
    # Streamed volumes cannot be written
    obj = NiftiObject.from_fileobj(BytesIO(bio.getvalue()), volume='streamed')
    with pytest.raises(ValueError):
        obj.to_filename(tmp_path / 'nope.nii')
