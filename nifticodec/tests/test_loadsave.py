# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Testing loadsave module"""
import pathlib

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from .. import load, load_pair, save
from ..errors import InvalidFormat
from ..nifti1 import Nifti1Header
from ..openers import Opener
from ..writer import header_for_data, write_nifti

DATA = np.arange(60, dtype=np.float32).reshape((3, 4, 5))


@pytest.mark.parametrize('fname', ['img.nii', 'img.nii.gz', 'img.NII.GZ'])
def test_load_save(tmp_path, fname):
    path = tmp_path / fname
    write_nifti(path, DATA)
    for arg in (path, str(path)):
        obj = load(arg)
        assert obj.shape == (3, 4, 5)
        assert_array_equal(obj.get_data(np.float32), DATA)
    out = tmp_path / ('copy_' + fname)
    save(obj, out)
    assert_array_equal(load(out).get_data(np.float32), DATA)
    obj = load(path, volume='lazy')
    assert not obj.volume.is_loaded
    assert obj.volume.get_f32((2, 3, 4)) == 59
    with load(path, volume='streamed', slice_rank=1) as obj:
        assert obj.volume.slices_left == 20
        assert obj.volume.read_slice().get_f32((2,)) == 40


def test_load_pair(tmp_path):
    hdr = header_for_data(DATA)
    hdr['magic'] = b'ni1'
    hdr['vox_offset'] = 0
    hdr_fname = tmp_path / 'pair.hdr'
    with Opener(hdr_fname, 'wb') as fobj:
        hdr.write_to(fobj)
    img_fname = tmp_path / 'pair.img.gz'
    with Opener(img_fname, 'wb') as fobj:
        fobj.write(DATA.astype('<f4').tobytes(order='F'))
    assert_array_equal(load(hdr_fname).get_data(np.float32), DATA)
    obj = load_pair(hdr_fname, img_fname)
    assert_array_equal(obj.get_data(np.float32), DATA)
    # Pairs save as single files
    save(obj, tmp_path / 'single.nii')
    back = load(tmp_path / 'single.nii')
    assert back.header.is_single_file()
    assert_array_equal(back.get_data(np.float32), DATA)


def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load(tmp_path / 'nothere.nii')
    empty = tmp_path / 'empty.nii'
    empty.write_bytes(b'')
    with pytest.raises(InvalidFormat):
        load(empty)
    # not really gzipped
    fake_gz = tmp_path / 'fake.nii.gz'
    write_nifti(tmp_path / 'fake.nii', DATA)
    fake_gz.write_bytes((tmp_path / 'fake.nii').read_bytes())
    with pytest.raises(InvalidFormat):
        load(fake_gz)
    # truncated header
    short = tmp_path / 'short.nii'
    short.write_bytes(b'\x5c\x01\x00\x00' + b'\x00' * 100)
    with pytest.raises(IOError):
        load(short)
    with pytest.raises(ValueError):
        load(tmp_path / 'fake.nii', volume='unknown')


def test_save_errors(tmp_path):
    write_nifti(tmp_path / 'good.nii', DATA)
    obj = load(tmp_path / 'good.nii')
    for bad in ('img.hdr', 'img.img', 'img.mgz', 'img'):
        with pytest.raises(ValueError):
            save(obj, tmp_path / bad)
    obj = load(tmp_path / 'good.nii', volume='streamed')
    with pytest.raises(ValueError):
        save(obj, tmp_path / 'streamed.nii')
    obj.close()


def test_header_fields_survive(tmp_path):
    ref = Nifti1Header()
    ref['descrip'] = b'fields survive'
    ref.set_xyzt_units('mm', 'sec')
    write_nifti(tmp_path / 'ref.nii', DATA, ref)
    obj = load(pathlib.Path(tmp_path) / 'ref.nii')
    save(obj, tmp_path / 'again.nii.gz')
    back = load(tmp_path / 'again.nii.gz')
    assert back.header['descrip'] == b'fields survive'
    assert back.header.get_xyzt_units() == ('mm', 'sec')
