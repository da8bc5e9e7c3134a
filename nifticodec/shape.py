# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Shapes and N-dimensional indices for NIfTI-1 volumes

The NIfTI-1 ``dim`` field is an array of 8 integers; ``dim[0]`` is the rank,
between 1 and 7, and ``dim[1:rank + 1]`` are the extents of the used axes.
Trailing entries are ignored.  :class:`Idx` and :class:`Dim` wrap this raw
field and validate it once, so later code can trust it.

Voxels are stored in column-major order: the first axis varies fastest.

>>> dim = Dim([2, 3, 4, 0, 0, 0, 0, 0])
>>> dim.shape
(3, 4)
>>> dim.element_count()
12
>>> coords_to_index((1, 2), dim)
7
>>> index_to_coords(7, dim)
(1, 2)
"""
from functools import reduce
from itertools import product
from operator import mul

import numpy as np

from .errors import (InconsistentDim, IncorrectVolumeDimensionality,
                     OutOfBounds, AxisOutOfBounds, Overflow)

#: maximum rank of a NIfTI-1 volume
MAX_RANK = 7

#: largest number of elements (or bytes) we agree to address
MAX_ELEMENTS = int(np.iinfo(np.intp).max)


def _raw_from_sequence(values):
    values = [int(v) for v in values]
    if not 0 < len(values) <= MAX_RANK:
        raise InconsistentDim(0, len(values))
    return [len(values)] + values + [0] * (MAX_RANK - len(values))


def checked_product(values, limit=MAX_ELEMENTS):
    """Product of `values`, raising :class:`Overflow` if above `limit`

    >>> checked_product([3, 4, 5])
    60
    >>> checked_product([2, 3], limit=5)
    Traceback (most recent call last):
        ...
    nifticodec.errors.Overflow: product of (2, 3) exceeds 5
    """
    values = tuple(int(v) for v in values)
    result = 1
    for value in values:
        result *= value
        if result > limit:
            raise Overflow(f'product of {values} exceeds {limit}')
    return result


class Idx(object):
    """Validated N-dimensional index

    Parameters
    ----------
    raw : sequence of 8 ints
        ``raw[0]`` is the rank (1 to 7), ``raw[1:rank + 1]`` the coordinates.
        Other entries are ignored.

    Examples
    --------
    >>> idx = Idx([3, 1, 2, 5, 0, 0, 0, 0])
    >>> tuple(idx)
    (1, 2, 5)
    >>> Idx.from_sequence((1, 2, 5)) == idx
    True
    """

    def __init__(self, raw):
        raw = tuple(int(v) for v in raw)
        if len(raw) != MAX_RANK + 1:
            raise ValueError(f'raw field should have {MAX_RANK + 1} entries')
        if not 1 <= raw[0] <= MAX_RANK:
            raise InconsistentDim(0, raw[0])
        self._raw = raw

    @classmethod
    def from_sequence(klass, values):
        """Make instance from concrete values, without a leading rank"""
        return klass(_raw_from_sequence(values))

    @property
    def raw(self):
        """Raw 8 entry field, including rank"""
        return self._raw

    @property
    def rank(self):
        return self._raw[0]

    @property
    def shape(self):
        """Used entries as a tuple"""
        return self._raw[1:self.rank + 1]

    def __len__(self):
        return self.rank

    def __iter__(self):
        return iter(self.shape)

    def __getitem__(self, item):
        return self.shape[item]

    def __eq__(self, other):
        if isinstance(other, Idx):
            return self.shape == other.shape
        try:
            return self.shape == tuple(other)
        except TypeError:
            return False

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.shape)

    def __repr__(self):
        return f'{self.__class__.__name__}.from_sequence({self.shape})'


class Dim(Idx):
    """Validated volume shape

    As for :class:`Idx`, but every used extent must also be positive.

    Examples
    --------
    >>> dim = Dim([3, 64, 32, 16, 0, 0, 0, 0])
    >>> dim.shape
    (64, 32, 16)
    >>> Dim([3, 64, 0, 16, 1, 1, 1, 1])
    Traceback (most recent call last):
        ...
    nifticodec.errors.InconsistentDim: inconsistent dimension at dim[2]: 0
    """

    def __init__(self, raw):
        super(Dim, self).__init__(raw)
        for axis, extent in enumerate(self.shape):
            if extent <= 0:
                raise InconsistentDim(axis + 1, extent)

    def element_count(self):
        """Number of elements in a volume of this shape

        Raises :class:`~nifticodec.errors.Overflow` for a count too large to
        address.
        """
        return checked_product(self.shape)

    def split(self, axis):
        """Split into axes before `axis`, and axes from `axis` onward

        Parameters
        ----------
        axis : int
            Split point, from 1 to ``rank - 1``, so both parts have at least
            one axis.

        Returns
        -------
        leading : Dim
            Shape of the axes before `axis`
        trailing : Dim
            Shape of the axes from `axis` onward

        Examples
        --------
        >>> lead, trail = Dim.from_sequence((4, 5, 6)).split(2)
        >>> lead.shape, trail.shape
        ((4, 5), (6,))
        """
        if not 0 < axis < self.rank:
            raise AxisOutOfBounds(axis)
        shape = self.shape
        return (Dim.from_sequence(shape[:axis]),
                Dim.from_sequence(shape[axis:]))

    def index_iter(self):
        """Iterable over every index of this shape, in column-major order"""
        return DimIter(self)


class DimIter(object):
    """Restartable iterable over all indices of a shape

    Traversal is in NIfTI volume order, with the first axis varying fastest.

    >>> list(DimIter(Dim.from_sequence((2, 2))))
    [(0, 0), (1, 0), (0, 1), (1, 1)]
    """

    def __init__(self, dim):
        self.dim = dim

    def __iter__(self):
        ranges = [range(extent) for extent in reversed(self.dim.shape)]
        for reversed_coords in product(*ranges):
            yield reversed_coords[::-1]

    def __len__(self):
        return self.dim.element_count()


def _extents(dim):
    return dim.shape if isinstance(dim, Idx) else tuple(int(d) for d in dim)


def coords_to_index(coords, dim):
    """Flat column-major offset of `coords` in a volume of shape `dim`

    Parameters
    ----------
    coords : sequence of int
        One coordinate per axis
    dim : Dim or sequence of int
        Volume shape

    Returns
    -------
    index : int
        Element offset (not byte offset) into the voxel buffer

    Examples
    --------
    >>> coords_to_index((1, 1, 1), (16, 16, 3))
    273
    >>> coords_to_index((16, 15, 2), (16, 16, 3))
    Traceback (most recent call last):
        ...
    nifticodec.errors.OutOfBounds: out of bounds access to volume at (16, 15, 2)
    """
    extents = _extents(dim)
    coords = tuple(int(c) for c in coords)
    if len(coords) != len(extents) or len(coords) == 0:
        raise IncorrectVolumeDimensionality(len(extents), len(coords))
    for c, d in zip(coords, extents):
        if not 0 <= c < d:
            raise OutOfBounds(coords)
    # Horner's rule from the slowest axis down to the fastest
    index = coords[-1]
    for c, d in zip(reversed(coords[:-1]), reversed(extents[:-1])):
        index = index * d + c
    return index


def index_to_coords(index, dim):
    """Coordinates of flat column-major offset `index` in shape `dim`

    Inverse of :func:`coords_to_index`.
    """
    extents = _extents(dim)
    index = int(index)
    if not 0 <= index < reduce(mul, extents, 1):
        raise OutOfBounds((index,))
    coords = []
    for d in extents:
        index, c = divmod(index, d)
        coords.append(c)
    return tuple(coords)
