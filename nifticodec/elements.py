# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Codec for the numeric voxel representations of NIfTI-1

Each supported on-disk type is described by a :class:`DataElement`, which
knows how to decode one value or a whole buffer under a given byte order, how
to build its own representation from another one, and how to apply the
``value * slope + inter`` rescaling in its own arithmetic.

The set of supported types is closed.  Asking for any other type code raises
:class:`~nifticodec.errors.UnsupportedDataType`:

>>> element_for_code(16).label
'float32'
>>> element_for_code(128)
Traceback (most recent call last):
    ...
nifticodec.errors.UnsupportedDataType: unsupported data type code 128
"""
import numpy as np

from .errors import UnsupportedDataType
from .volumeutils import (Recoder, DtypeMapper, make_dt_codes, endian_codes,
                          native_code)

_rgb_dtype = np.dtype([('R', 'u1'), ('G', 'u1'), ('B', 'u1')])
_rgba_dtype = np.dtype([('R', 'u1'), ('G', 'u1'), ('B', 'u1'), ('A', 'u1')])

_dtdefs = (  # code, label, dtype definition, niistring
    (0, 'none', np.void, ''),
    (1, 'binary', np.void, ''),
    (2, 'uint8', np.uint8, 'NIFTI_TYPE_UINT8'),
    (4, 'int16', np.int16, 'NIFTI_TYPE_INT16'),
    (8, 'int32', np.int32, 'NIFTI_TYPE_INT32'),
    (16, 'float32', np.float32, 'NIFTI_TYPE_FLOAT32'),
    (32, 'complex64', np.complex64, 'NIFTI_TYPE_COMPLEX64'),
    (64, 'float64', np.float64, 'NIFTI_TYPE_FLOAT64'),
    (128, 'RGB', _rgb_dtype, 'NIFTI_TYPE_RGB24'),
    (255, 'all', np.void, ''),
    (256, 'int8', np.int8, 'NIFTI_TYPE_INT8'),
    (512, 'uint16', np.uint16, 'NIFTI_TYPE_UINT16'),
    (768, 'uint32', np.uint32, 'NIFTI_TYPE_UINT32'),
    (1024, 'int64', np.int64, 'NIFTI_TYPE_INT64'),
    (1280, 'uint64', np.uint64, 'NIFTI_TYPE_UINT64'),
    # Extended precision types are opaque blocks of the right size
    (1536, 'float128', 'V16', 'NIFTI_TYPE_FLOAT128'),
    (1792, 'complex128', np.complex128, 'NIFTI_TYPE_COMPLEX128'),
    (2048, 'complex256', 'V32', 'NIFTI_TYPE_COMPLEX256'),
    (2304, 'RGBA', _rgba_dtype, 'NIFTI_TYPE_RGBA32'),
)

#: All NIfTI-1 data type codes, supported or not
data_type_codes = make_dt_codes(_dtdefs)


def _saturating_int_cast(values, dtype):
    # Truncate toward zero, clamp to the integer range, NaN to 0
    info = np.iinfo(dtype)
    values = np.trunc(values)
    too_high = values >= float(info.max)
    too_low = values <= float(info.min)
    safe = np.where(too_high | too_low | np.isnan(values), 0, values)
    out = safe.astype(dtype)
    out = np.where(too_high, np.array(info.max, dtype), out)
    return np.where(too_low, np.array(info.min, dtype), out)


class DataElement(object):
    """Codec for one supported numeric representation

    Parameters
    ----------
    code : int
        NIfTI-1 data type code
    label : str
        Short name of the type
    np_type : numpy scalar type
        In-memory representation of one element
    working_type : None or numpy scalar type
        Type in which rescaling arithmetic is done.  None means the element
        type itself.

    Examples
    --------
    >>> u8 = element_for_code(2)
    >>> int(u8.from_raw(b"\\x0e"))
    14
    >>> int(u8.linear_transform(14, 1, -5))
    9
    >>> int(u8.linear_transform(14, 0, -5))  # slope of 0 means no scaling
    14
    """

    def __init__(self, code, label, np_type, working_type=None):
        self.code = code
        self.label = label
        self.type = np_type
        self.dtype = np.dtype(np_type)
        self.working_type = np_type if working_type is None else working_type

    @property
    def itemsize(self):
        return self.dtype.itemsize

    @property
    def bitpix(self):
        return self.dtype.itemsize * 8

    @property
    def is_complex(self):
        return self.dtype.kind == 'c'

    def __repr__(self):
        return f'{self.__class__.__name__}({self.code}, {self.label!r})'

    def __eq__(self, other):
        return isinstance(other, DataElement) and self.code == other.code

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.code)

    def dtype_for(self, endianness=native_code):
        """Numpy dtype of stored elements in byte order `endianness`"""
        return self.dtype.newbyteorder(endian_codes[endianness])

    def from_raw(self, raw, endianness=native_code, offset=0):
        """Decode the single element at byte `offset` in `raw`

        Parameters
        ----------
        raw : bytes-like
            Raw voxel bytes
        endianness : str, optional
            Byte order code of `raw`
        offset : int, optional
            Byte offset of the element in `raw`

        Returns
        -------
        value : numpy scalar
            Decoded value, in native byte order
        """
        arr = np.frombuffer(raw, dtype=self.dtype_for(endianness),
                            count=1, offset=offset)
        return arr.astype(self.dtype)[0]

    def from_raw_many(self, raw, endianness=native_code):
        """Decode all elements in `raw` into a new native 1D array"""
        arr = np.frombuffer(raw, dtype=self.dtype_for(endianness))
        return arr.astype(self.dtype)

    def from_raw_many_inplace(self, buffer, endianness=native_code):
        """Decode writable `buffer` in place, byte-swapping if needed

        Returns a native order 1D array sharing memory with `buffer`.  After
        this call the bytes in `buffer` are in native order.
        """
        arr = np.frombuffer(buffer, dtype=self.dtype)
        if endian_codes[endianness] != native_code and self.itemsize > 1:
            arr.byteswap(inplace=True)
        return arr

    def cast_many(self, values):
        """Convert array of another supported representation to this one

        Complex to real keeps the real part.  Float to integer truncates
        toward zero and saturates at the integer limits.
        """
        values = np.asarray(values)
        if values.dtype == self.dtype:
            return values
        if values.dtype.kind == 'c' and not self.is_complex:
            values = values.real
        if self.dtype.kind in 'iu' and values.dtype.kind == 'f':
            return _saturating_int_cast(values, self.dtype)
        return values.astype(self.dtype)

    def cast(self, value):
        """Convert one value of another representation to this one"""
        return self.cast_many(value)[()]

    def linear_transform_many(self, values, slope, inter):
        """Apply ``values * slope + inter`` in this type's arithmetic

        A `slope` of exactly 0 means the data are not scaled, and `values` are
        returned unchanged (as this type).
        """
        values = self.cast_many(values)
        if slope == 0:
            return values
        work = self.working_type
        scaled = (values.astype(work) * np.array(slope).astype(work) +
                  np.array(inter).astype(work))
        return self.cast_many(scaled)

    def linear_transform(self, value, slope, inter):
        """Rescale a single value; see :meth:`linear_transform_many`"""
        return self.linear_transform_many(value, slope, inter)[()]


_elements = (
    DataElement(2, 'uint8', np.uint8, np.float32),
    DataElement(4, 'int16', np.int16, np.float32),
    DataElement(8, 'int32', np.int32, np.float32),
    DataElement(16, 'float32', np.float32),
    DataElement(32, 'complex64', np.complex64),
    DataElement(64, 'float64', np.float64),
    DataElement(256, 'int8', np.int8, np.float32),
    DataElement(512, 'uint16', np.uint16, np.float32),
    DataElement(768, 'uint32', np.uint32, np.float32),
    DataElement(1024, 'int64', np.int64, np.float64),
    DataElement(1280, 'uint64', np.uint64, np.float64),
    DataElement(1792, 'complex128', np.complex128),
)

#: Supported elements, by code, label, niistring or numpy type
element_codes = Recoder(
    [(e.code, e, e.label, data_type_codes.niistring[e.code], e.type, e.dtype)
     for e in _elements],
    fields=('code', 'element'),
    map_maker=DtypeMapper)


def element_for_code(code):
    """Return :class:`DataElement` for NIfTI-1 data type `code`

    Parameters
    ----------
    code : int or str
        Data type code, or any alias known to ``data_type_codes``

    Raises
    ------
    UnsupportedDataType
        If the code is known but not implemented, or not known at all
    """
    try:
        code = data_type_codes.code[code]
    except (KeyError, TypeError):
        raise UnsupportedDataType(code)
    try:
        return element_codes.element[code]
    except KeyError:
        raise UnsupportedDataType(code)


def element_for_dtype(dtype):
    """Return :class:`DataElement` for numpy `dtype`, any byte order

    >>> element_for_dtype(np.dtype('>i2')).label
    'int16'
    """
    dtype = np.dtype(dtype)
    try:
        return element_codes.element[dtype.newbyteorder('=')]
    except KeyError:
        raise UnsupportedDataType(dtype.str)
