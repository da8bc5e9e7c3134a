# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Write arrays as single file NIfTI-1 images

Files are always written little-endian, with the voxel data in column-major
order after the header, the 4 byte extender and any extensions.  The shape
and data type in the header always come from the array written; all other
fields come from a reference header.

>>> from io import BytesIO
>>> bio = BytesIO()
>>> write_nifti(bio, np.arange(6, dtype=np.int16).reshape((2, 3)))
>>> len(bio.getvalue())
364
"""
import logging

import numpy as np

from .elements import element_for_dtype
from .nifti1 import Nifti1Header
from .openers import Opener

logger = logging.getLogger('nifticodec.writer')

#: byte order of written files
write_endianness = '<'


def header_for_data(data, reference=None):
    """Header for writing `data`, from fields of `reference`

    Parameters
    ----------
    data : array-like
        Voxel data to write
    reference : None or Nifti1Header, optional
        Source of all fields other than the shape, data type, magic and
        ``vox_offset``; None means a default header.  Its extensions are
        also kept.

    Returns
    -------
    header : Nifti1Header
        Little-endian single file header

    Examples
    --------
    >>> hdr = header_for_data(np.zeros((2, 3, 4), dtype=np.float32))
    >>> hdr.get_dim()
    Dim.from_sequence((2, 3, 4))
    >>> hdr['dim']
    array([3, 2, 3, 4, 1, 1, 1, 1], dtype=int16)
    >>> hdr.get_data_type()
    DataElement(16, 'float32')
    """
    data = np.asarray(data)
    if reference is None:
        reference = Nifti1Header()
    header = reference.as_byteswapped(write_endianness)
    header.extensions = reference.extensions
    header.set_data_shape(data.shape)
    header.set_data_dtype(data.dtype)
    header['magic'] = header.single_magic
    header['vox_offset'] = (header.single_vox_offset +
                            header.extensions.get_sizeondisk())
    return header


def write_header(fileobj, header):
    """Write `header`, extender and extensions to `fileobj`"""
    header.write_to(fileobj)
    logger.debug('wrote header with %d extensions', len(header.extensions))


def write_data(fileobj, header, data, scaled=True):
    """Write `data` to `fileobj` as stored values for `header`

    If `scaled` is True and `header` declares scaling, the stored values are
    ``(data - scl_inter) / scl_slope`` in the type of `data`.  A
    ``scl_slope`` of 0 counts as 1.  With `scaled` False, `data` already are
    the stored values.  Values are written in column-major order and in the
    byte order of `header`.
    """
    data = np.asarray(data)
    slope, inter = header.get_slope_inter()
    if slope == 0:
        slope = 1.0
    if scaled and (slope != 1 or inter != 0):
        work = np.complex128 if data.dtype.kind == 'c' else np.float64
        data = element_for_dtype(data.dtype).cast_many(
            (data.astype(work) - inter) / slope)
    out_dtype = data.dtype.newbyteorder(header.endianness)
    fileobj.write(data.astype(out_dtype).tobytes(order='F'))
    logger.debug('wrote %d bytes of voxel data', data.nbytes)


def write_nifti(filename, data, reference=None, scaled=True):
    """Write `data` as single file NIfTI-1 image

    Parameters
    ----------
    filename : str, path-like or file-like
        Output; names ending in ``.gz`` are gzip compressed
    data : array-like
        Voxel data, of a supported numeric type, with 1 to 7 dimensions
    reference : None or Nifti1Header, optional
        Header for all fields except shape, data type, magic and
        ``vox_offset``.  Its extensions are written too.
    scaled : bool, optional
        False if `data` are stored values, to be written without applying
        the scaling of `reference`
    """
    data = np.asarray(data)
    header = header_for_data(data, reference)
    with Opener(filename, 'wb') as fileobj:
        write_header(fileobj, header)
        write_data(fileobj, header, data, scaled)
