# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Exceptions raised while reading, validating and writing NIfTI-1 data

Every condition has its own class, and every class derives from
:class:`NiftiError`, so ``except NiftiError`` catches anything this package
raises on purpose.  Each class also derives from the closest builtin exception,
so ``except IndexError`` works for out of bounds access, and so on.

Running out of slices in a streamed volume is not an error, and has no class
here.
"""


class NiftiError(Exception):
    """Base class for all errors in this package"""


class InvalidFormat(NiftiError, ValueError):
    """Data does not look like NIfTI-1: the magic code is not recognized"""


class HeaderDataError(NiftiError, ValueError):
    """Header field values cannot support the requested computation"""


class NiftiIOError(NiftiError, IOError):
    """Failure of the underlying byte source

    The original exception is kept in ``cause`` and as ``__cause__``.
    """

    def __init__(self, msg, cause=None):
        super(NiftiIOError, self).__init__(msg)
        self.cause = cause


class MissingVolumeFile(NiftiIOError):
    """Detached header without a companion image file"""


class NoVolumeData(NiftiError):
    """Stream claims to hold a detached header only, so has no voxels"""


class InconsistentDim(NiftiError, ValueError):
    """Rank out of range, or a used extent of zero

    ``axis`` is 0 for a bad rank, otherwise the 1-based position of the bad
    extent in the raw ``dim`` field; ``value`` is the offending entry.
    """

    def __init__(self, axis, value):
        super(InconsistentDim, self).__init__(
            f'inconsistent dimension at dim[{axis}]: {value}')
        self.axis = axis
        self.value = value


class OutOfBounds(NiftiError, IndexError):
    """Coordinate outside the extent of its axis"""

    def __init__(self, coords):
        coords = tuple(int(c) for c in coords)
        super(OutOfBounds, self).__init__(
            f'out of bounds access to volume at {coords}')
        self.coords = coords


class AxisOutOfBounds(NiftiError, IndexError):
    """Axis index not smaller than the rank of the volume"""

    def __init__(self, axis):
        super(AxisOutOfBounds, self).__init__(f'axis {axis} out of bounds')
        self.axis = axis


class IncorrectVolumeDimensionality(NiftiError, ValueError):
    """Coordinates of a different rank than the volume"""

    def __init__(self, expected, got):
        super(IncorrectVolumeDimensionality, self).__init__(
            f'expected {expected} coordinates, got {got}')
        self.expected = expected
        self.got = got


class UnsupportedDataType(NiftiError, TypeError):
    """Voxel data type code not implemented (or not known at all)"""

    def __init__(self, code):
        super(UnsupportedDataType, self).__init__(
            f'unsupported data type code {code}')
        self.code = code


class IncompatibleLength(NiftiError, ValueError):
    """Raw buffer length differs from ``element_count * itemsize``"""

    def __init__(self, got, expected):
        super(IncompatibleLength, self).__init__(
            f'buffer holds {got} bytes, but {expected} bytes are needed')
        self.got = got
        self.expected = expected


class Overflow(NiftiError, OverflowError):
    """Element count or byte size too large to address"""
