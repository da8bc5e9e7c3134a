# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Random access to NIfTI-1 voxel data

Every volume kind in this package shares one read contract: a ``dim``, a
``data_type``, and ``get(coords, dtype)`` returning the rescaled value at
`coords`, computed in the arithmetic of `dtype`.  :class:`InMemNiftiVolume`
holds all the voxel bytes in one buffer, as read from the file, and decodes
on each access.

>>> raw = bytes(range(0, 127, 2))
>>> vol = InMemNiftiVolume((4, 4, 4), 'uint8', raw, slope=1, inter=-5)
>>> vol.get_f32((3, 1, 0))
9.0
>>> vol.get_u8((2, 1, 1))
39
>>> sl = vol.get_slice(2, 1)
>>> sl.shape
(4, 4)
>>> sl.get_u8((2, 1))
39
"""
import logging
import typing as ty

import numpy as np

from .elements import DataElement, element_for_code, element_for_dtype
from .errors import (AxisOutOfBounds, IncompatibleLength,
                     IncorrectVolumeDimensionality, OutOfBounds)
from .shape import Dim, checked_product, coords_to_index
from .volumeutils import endian_codes, native_code, readinto_exact, skip_to

logger = logging.getLogger('nifticodec.volume')


class NiftiVolume(ty.Protocol):
    """Protocol shared by in-memory, lazy and slice volumes"""

    @property
    def dim(self) -> Dim:
        ...  # pragma: no cover

    @property
    def data_type(self) -> DataElement:
        ...  # pragma: no cover

    def get(self, coords, dtype=np.float64):
        ...  # pragma: no cover


def _as_dim(dim):
    return dim if isinstance(dim, Dim) else Dim.from_sequence(dim)


def _as_element(data_type):
    if isinstance(data_type, DataElement):
        return data_type
    return element_for_code(data_type)


class _VolumeAccess(object):
    """Conveniences built on ``dim``, ``get`` and ``get_data``"""

    @property
    def shape(self):
        return self.dim.shape

    @property
    def rank(self):
        return self.dim.rank

    ndim = rank

    def get_f32(self, coords):
        return float(self.get(coords, np.float32))

    def get_f64(self, coords):
        return float(self.get(coords, np.float64))

    def get_u8(self, coords):
        return int(self.get(coords, np.uint8))

    def get_i8(self, coords):
        return int(self.get(coords, np.int8))

    def get_u16(self, coords):
        return int(self.get(coords, np.uint16))

    def get_i16(self, coords):
        return int(self.get(coords, np.int16))

    def get_u32(self, coords):
        return int(self.get(coords, np.uint32))

    def get_i32(self, coords):
        return int(self.get(coords, np.int32))

    def get_u64(self, coords):
        return int(self.get(coords, np.uint64))

    def get_i64(self, coords):
        return int(self.get(coords, np.int64))

    def get_slice(self, axis, index):
        """Volume of rank one less, with `axis` fixed at `index`

        Parameters
        ----------
        axis : int
            Axis to fix, from 0 to ``rank - 1``
        index : int
            Position along `axis`

        Returns
        -------
        view : SliceView
            Read only view sharing data with this volume

        Raises
        ------
        AxisOutOfBounds
            If `axis` is not an axis of this volume
        OutOfBounds
            If `index` is outside the extent of `axis`
        """
        axis = int(axis)
        index = int(index)
        if not 0 <= axis < self.rank:
            raise AxisOutOfBounds(axis)
        if not 0 <= index < self.shape[axis]:
            coords = [0] * self.rank
            coords[axis] = index
            raise OutOfBounds(coords)
        return SliceView(self, axis, index)

    def __array__(self, dtype=None, copy=None):
        return self.get_data(np.float64 if dtype is None else dtype)


class InMemNiftiVolume(_VolumeAccess):
    """Volume with all voxel bytes held in memory

    Parameters
    ----------
    dim : Dim or sequence of int
        Volume shape
    data_type : DataElement or data type code
        Stored element representation
    raw_data : bytes-like
        Voxel bytes in column-major order.  A ``bytearray`` is kept without
        copying.
    slope, inter : float, optional
        Rescaling of stored values; a `slope` of 0 means no rescaling
    endianness : str, optional
        Byte order of `raw_data`

    Raises
    ------
    IncompatibleLength
        If ``len(raw_data)`` is not the element count times the element size
    """

    def __init__(self, dim, data_type, raw_data, slope=0.0, inter=0.0,
                 endianness=native_code):
        self._dim = _as_dim(dim)
        self._data_type = _as_element(data_type)
        expected = checked_product(
            (self._dim.element_count(), self._data_type.itemsize))
        if not isinstance(raw_data, bytearray):
            raw_data = bytearray(raw_data)
        if len(raw_data) != expected:
            raise IncompatibleLength(len(raw_data), expected)
        self._raw_data = raw_data
        self._slope = float(slope)
        self._inter = float(inter)
        self._endianness = endian_codes[endianness]

    @classmethod
    def from_fileobj(klass, fileobj, header, offset=None):
        """Read volume described by `header` from `fileobj`

        Parameters
        ----------
        fileobj : file-like
            Source of voxel bytes
        header : Nifti1Header
            Gives shape, data type, scaling and byte order
        offset : None or int, optional
            If not None, first move forward to this byte offset.  None reads
            from the current position.
        """
        dim = header.get_dim()
        data_type = header.get_data_type()
        n_bytes = checked_product((dim.element_count(), data_type.itemsize))
        if offset is not None:
            skip_to(fileobj, offset)
        raw_data = readinto_exact(fileobj, bytearray(n_bytes),
                                  what='voxel data')
        logger.debug('read %d bytes of voxel data', n_bytes)
        slope, inter = header.get_slope_inter()
        return klass(dim, data_type, raw_data, slope, inter,
                     header.endianness)

    @property
    def dim(self):
        return self._dim

    @property
    def data_type(self):
        return self._data_type

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
    def raw_data(self):
        """Read only view of the stored voxel bytes"""
        return memoryview(self._raw_data).toreadonly()

    @property
    def raw_data_mut(self):
        """Stored voxel bytes, writable in place

        The view has a fixed length, and the volume buffer cannot be resized
        while it is held.
        """
        return memoryview(self._raw_data)

    def get(self, coords, dtype=np.float64):
        """Value at `coords`, rescaled in the arithmetic of `dtype`

        Parameters
        ----------
        coords : sequence of int
            One coordinate per axis
        dtype : numpy dtype specifier, optional
            Output representation

        Returns
        -------
        value : numpy scalar of `dtype`
        """
        index = coords_to_index(coords, self._dim)
        element = self._data_type
        value = element.from_raw(self._raw_data, self._endianness,
                                 index * element.itemsize)
        return element_for_dtype(dtype).linear_transform(
            value, self._slope, self._inter)

    def get_unscaled(self):
        """Stored values as native array of the stored type, no rescaling"""
        values = self._data_type.from_raw_many(self._raw_data,
                                               self._endianness)
        return values.reshape(self.shape, order='F')

    def get_data(self, dtype=np.float64):
        """All values as column-major array of `dtype`, rescaled"""
        return element_for_dtype(dtype).linear_transform_many(
            self.get_unscaled(), self._slope, self._inter)

    def __repr__(self):
        return (f'{self.__class__.__name__}({self.shape}, '
                f'{self._data_type.label!r})')


class SliceView(_VolumeAccess):
    """Read only view of `volume` with `axis` fixed at `index`

    Use :meth:`_VolumeAccess.get_slice` to check arguments on construction.
    """

    def __init__(self, volume, axis, index):
        self._volume = volume
        self._axis = axis
        self._index = index
        shape = list(volume.shape)
        del shape[axis]
        # A slice of a rank 1 volume is a single value; keep it as (1,)
        self._dim = Dim.from_sequence(shape or [1])

    @property
    def dim(self):
        return self._dim

    @property
    def data_type(self):
        return self._volume.data_type

    @property
    def axis(self):
        return self._axis

    @property
    def index(self):
        return self._index

    def _parent_coords(self, coords):
        coords = list(coords)
        parent_rank = self._volume.rank
        if parent_rank == 1:
            if coords != [0]:
                raise OutOfBounds(coords)
            return [self._index]
        if len(coords) != parent_rank - 1:
            raise IncorrectVolumeDimensionality(parent_rank - 1, len(coords))
        coords.insert(self._axis, self._index)
        return coords

    def get(self, coords, dtype=np.float64):
        return self._volume.get(self._parent_coords(coords), dtype)

    def get_data(self, dtype=np.float64):
        data = np.take(self._volume.get_data(dtype), self._index,
                       axis=self._axis)
        return np.asfortranarray(data).reshape(self.shape, order='F')

    def __repr__(self):
        return (f'{self.__class__.__name__}({self._volume!r}, '
                f'axis={self._axis}, index={self._index})')
