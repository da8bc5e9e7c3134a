# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Forward only reading of a volume, one slice at a time

A :class:`StreamedNiftiVolume` reads voxel data from an open byte source in
pieces, so a volume never needs to be in memory all at once.  A slice is the
volume with its last axis removed, by default.  Each read gives an
:class:`~nifticodec.volume.InMemNiftiVolume` of the slice shape:

>>> from io import BytesIO
>>> raw = bytes(range(1, 24, 2))
>>> vol = StreamedNiftiVolume(BytesIO(raw), (2, 3, 2), 'uint8')
>>> vol.slice_dim.shape, vol.slices_left
((2, 3), 2)
>>> first = vol.read_slice()
>>> first.get_u8((1, 2))
11
>>> int(vol.read_slice().get_data(np.uint8)[0, 0])
13
>>> vol.read_slice() is None
True

Running out of slices is not an error; ``read_slice`` returns None from then
on, and iteration stops.
"""
import logging
from itertools import islice

import numpy as np

from .openers import Opener
from .shape import checked_product
from .volume import InMemNiftiVolume, _as_dim, _as_element
from .volumeutils import endian_codes, native_code, readinto_exact, skip_to

logger = logging.getLogger('nifticodec.streamed')


class StreamedNiftiVolume(object):
    """Volume read from `source` one slice at a time

    Parameters
    ----------
    source : file-like or Opener
        Positioned at the start of the voxel data.  If an :class:`Opener`
        that opened its own file, :meth:`close` closes it.
    dim : Dim or sequence of int
        Shape of the whole volume, rank 2 or more
    data_type : DataElement or data type code
        Stored element representation
    slope, inter : float, optional
        Rescaling of stored values; a `slope` of 0 means no rescaling
    endianness : str, optional
        Byte order of the stored data
    slice_rank : None or int, optional
        Rank of each slice, from 1 to ``rank - 1``.  None means ``rank - 1``.

    Raises
    ------
    AxisOutOfBounds
        If `slice_rank` is not a valid split point of `dim`.  A rank 1 volume
        cannot be streamed.
    """

    def __init__(self, source, dim, data_type, slope=0.0, inter=0.0,
                 endianness=native_code, slice_rank=None):
        self._source = source
        self._dim = _as_dim(dim)
        self._data_type = _as_element(data_type)
        self._slope = float(slope)
        self._inter = float(inter)
        self._endianness = endian_codes[endianness]
        self._slices_read = 0
        self._set_slice_rank(slice_rank)

    @classmethod
    def from_fileobj(klass, source, header, slice_rank=None, offset=None):
        """Make streamed volume for data described by `header`

        Parameters
        ----------
        source : file-like or Opener
            Source of voxel bytes
        header : Nifti1Header
            Gives shape, data type, scaling and byte order
        slice_rank : None or int, optional
            See class docstring
        offset : None or int, optional
            If not None, first move forward to this byte offset, reading and
            dropping any bytes before it.
        """
        if offset is not None:
            skip_to(source, offset)
        slope, inter = header.get_slope_inter()
        return klass(source, header.get_dim(), header.get_data_type(),
                     slope, inter, header.endianness, slice_rank)

    def _set_slice_rank(self, slice_rank):
        if slice_rank is None:
            slice_rank = self._dim.rank - 1
        slice_dim, trailing = self._dim.split(slice_rank)
        self._slice_rank = slice_rank
        self._slice_dim = slice_dim
        self._trailing = trailing
        self._slice_bytes = checked_product(
            (slice_dim.element_count(), self._data_type.itemsize))
        self._slices_left = trailing.element_count()

    def with_slice_rank(self, slice_rank):
        """Set rank of the slices to read, and return this volume

        Only allowed before the first read.

        >>> from io import BytesIO
        >>> vol = StreamedNiftiVolume(BytesIO(bytes(24)), (2, 3, 4), 'uint8')
        >>> vol.with_slice_rank(1).slices_left
        12
        """
        if self._slices_read:
            raise ValueError('cannot change slice rank after reading')
        self._set_slice_rank(slice_rank)
        return self

    @property
    def dim(self):
        """Shape of the whole volume"""
        return self._dim

    @property
    def data_type(self):
        return self._data_type

    @property
    def slice_dim(self):
        """Shape of each slice"""
        return self._slice_dim

    @property
    def slice_rank(self):
        return self._slice_rank

    @property
    def slices_read(self):
        return self._slices_read

    @property
    def slices_left(self):
        return self._slices_left

    def _advance(self):
        self._slices_read += 1
        self._slices_left = max(self._slices_left - 1, 0)
        logger.debug('read slice %d, %d left', self._slices_read,
                     self._slices_left)

    def _slice_volume(self, raw_data):
        return InMemNiftiVolume(self._slice_dim, self._data_type, raw_data,
                                self._slope, self._inter, self._endianness)

    def read_slice(self):
        """Read next slice into a new buffer

        Returns
        -------
        slice : InMemNiftiVolume or None
            Next slice, or None if all slices have been read
        """
        if self._slices_left == 0:
            return None
        raw_data = readinto_exact(self._source,
                                  bytearray(self._slice_bytes),
                                  what='volume slice')
        self._advance()
        return self._slice_volume(raw_data)

    def read_slice_inplace(self, buffer):
        """Read next slice into `buffer`, reusing its memory

        Previous contents of `buffer` are discarded, and `buffer` is resized
        to one slice.  The returned slice shares memory with `buffer`, so it
        changes when `buffer` is next used.

        Parameters
        ----------
        buffer : bytearray
            Buffer to fill

        Returns
        -------
        slice : InMemNiftiVolume or None
            Next slice, or None (leaving `buffer` untouched) if all slices
            have been read
        """
        if self._slices_left == 0:
            return None
        buffer.clear()
        buffer.extend(bytes(self._slice_bytes))
        readinto_exact(self._source, buffer, what='volume slice')
        self._advance()
        return self._slice_volume(buffer)

    next_inplace = read_slice_inplace

    def __iter__(self):
        return self

    def __next__(self):
        slice_vol = self.read_slice()
        if slice_vol is None:
            raise StopIteration
        return slice_vol

    def indexed(self):
        """Iterate over ``(index, slice)`` pairs for the slices left

        ``index`` is the position of the slice along the removed axes.

        >>> from io import BytesIO
        >>> vol = StreamedNiftiVolume(BytesIO(bytes(range(12))), (2, 3, 2),
        ...                           'uint8', slice_rank=1)
        >>> [(idx, sl.get_u8((1,))) for idx, sl in vol.indexed()][:3]
        [((0, 0), 1), ((1, 0), 3), ((2, 0), 5)]
        """
        indices = islice(iter(self._trailing.index_iter()),
                         self._slices_read, None)
        for index in indices:
            slice_vol = self.read_slice()
            if slice_vol is None:
                return
            yield index, slice_vol

    def close(self):
        """Close source if it is an :class:`Opener` that opened its file"""
        if isinstance(self._source, Opener):
            self._source.close_if_mine()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return (f'{self.__class__.__name__}({self._dim.shape}, '
                f'{self._data_type.label!r}, slice_rank={self._slice_rank})')
