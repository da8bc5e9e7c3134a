# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Volume that reads its voxel data on first access

The :class:`LazyNiftiVolume` knows everything it needs to read the voxels -
the file, the byte offset, the shape, type, scaling and byte order - but does
not read them until something asks for a value.  Then it reads the whole
volume into an :class:`~nifticodec.volume.InMemNiftiVolume` and answers all
later requests from that.

The file is opened for the read, and closed again afterwards, if the volume
was given a filename.  If given an open file object, it reads from that
object, so the object should stay open until the first access.

See :mod:`nifticodec.tests.test_arrayproxy` for checks of when reading
happens.
"""
import logging
from threading import RLock

import numpy as np

from .openers import Opener
from .shape import checked_product
from .volume import InMemNiftiVolume, _VolumeAccess, _as_dim, _as_element
from .volumeutils import endian_codes, native_code, readinto_exact

logger = logging.getLogger('nifticodec.arrayproxy')


class LazyNiftiVolume(_VolumeAccess):
    """Volume reading all voxel bytes from `file_like` on first access

    Parameters
    ----------
    file_like : str, path-like or file-like
        Filename (``.gz`` names are decompressed) or open file object
    dim : Dim or sequence of int
        Volume shape
    data_type : DataElement or data type code
        Stored element representation
    offset : int, optional
        Byte offset of the voxel data in the (decompressed) file
    slope, inter : float, optional
        Rescaling of stored values; a `slope` of 0 means no rescaling
    endianness : str, optional
        Byte order of the stored data
    """

    def __init__(self, file_like, dim, data_type, offset=0, slope=0.0,
                 inter=0.0, endianness=native_code):
        self.file_like = file_like
        self._dim = _as_dim(dim)
        self._data_type = _as_element(data_type)
        self._offset = int(offset)
        self._slope = float(slope)
        self._inter = float(inter)
        self._endianness = endian_codes[endianness]
        self._volume = None
        self._lock = RLock()

    @classmethod
    def from_header(klass, file_like, header, offset=None):
        """Make lazy volume for data described by `header`

        Parameters
        ----------
        file_like : str, path-like or file-like
            Source of voxel bytes
        header : Nifti1Header
            Gives shape, data type, scaling and byte order.  Later changes
            to `header` do not affect the volume.
        offset : None or int, optional
            Byte offset of the voxel data; None means ``vox_offset`` from
            `header`.
        """
        if offset is None:
            offset = header.get_vox_offset()
        slope, inter = header.get_slope_inter()
        return klass(file_like, header.get_dim(), header.get_data_type(),
                     offset, slope, inter, header.endianness)

    def __getstate__(self):
        """Returns the state of this ``LazyNiftiVolume`` during pickling."""
        state = self.__dict__.copy()
        state.pop('_lock', None)
        return state

    def __setstate__(self, state):
        """Sets the state of this ``LazyNiftiVolume`` during unpickling."""
        self.__dict__.update(state)
        self._lock = RLock()

    @property
    def dim(self):
        return self._dim

    @property
    def data_type(self):
        return self._data_type

    @property
    def offset(self):
        return self._offset

    @property
    def endianness(self):
        return self._endianness

    @property
    def scl_slope(self):
        return self._slope

    @property
    def scl_inter(self):
        return self._inter

    @property
    def is_loaded(self):
        """True if the voxel data have been read"""
        return self._volume is not None

    def load(self):
        """Read voxel data if not yet read, and return in-memory volume"""
        with self._lock:
            if self._volume is None:
                logger.debug('loading %d bytes of voxel data from %r',
                             self._dim.element_count() *
                             self._data_type.itemsize,
                             self.file_like)
                with Opener(self.file_like) as fileobj:
                    self._volume = self._read_from(fileobj)
            return self._volume

    def _read_from(self, fileobj):
        n_bytes = checked_product(
            (self._dim.element_count(), self._data_type.itemsize))
        fileobj.seek(self._offset)
        raw_data = readinto_exact(fileobj, bytearray(n_bytes),
                                  what='voxel data')
        return InMemNiftiVolume(self._dim, self._data_type, raw_data,
                                self._slope, self._inter, self._endianness)

    def get(self, coords, dtype=np.float64):
        return self.load().get(coords, dtype)

    def get_data(self, dtype=np.float64):
        return self.load().get_data(dtype)

    def get_unscaled(self):
        return self.load().get_unscaled()

    @property
    def raw_data(self):
        return self.load().raw_data

    def __repr__(self):
        return (f'{self.__class__.__name__}({self.file_like!r}, '
                f'{self.shape}, {self._data_type.label!r}, '
                f'offset={self._offset})')
