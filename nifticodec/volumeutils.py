# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Utility functions for reading NIfTI-1 data from byte sources"""

import sys

import numpy as np

from .errors import NiftiIOError
from .shape import checked_product

sys_is_le = sys.byteorder == 'little'
native_code = sys_is_le and '<' or '>'
swapped_code = sys_is_le and '>' or '<'

_endian_codes = (  # numpy code, aliases
    ('<', 'little', 'l', 'le', 'L', 'LE'),
    ('>', 'big', 'BIG', 'b', 'be', 'B', 'BE'),
    (native_code, 'native', 'n', 'N', '=', '|', 'i', 'I'),
    (swapped_code, 'swapped', 's', 'S', '!'))


class Recoder(object):
    """Class to return canonical code(s) from code or aliases

    >>> codes = ((2, 'uint8', 'NIFTI_TYPE_UINT8'),
    ...          (4, 'int16', 'NIFTI_TYPE_INT16'))
    >>> recodes = Recoder(codes, fields=('code', 'label', 'niistring'))
    >>> recodes.code['uint8']
    2
    >>> recodes.code['NIFTI_TYPE_INT16']
    4
    >>> recodes.label[4]
    'int16'
    >>> # Indexing the object directly gives the first field
    >>> recodes['int16']
    4
    """

    def __init__(self, codes, fields=('code',), map_maker=dict):
        """Create recoder object

        Parameters
        ----------
        codes : sequence of sequences
            Each sequence defines values (codes) that are equivalent
        fields : {('code',) string sequence}, optional
            names by which elements in sequences can be accessed
        map_maker: callable, optional
            constructor for dict-like objects used to store key value pairs.
            Default is ``dict``.
        """
        self.fields = tuple(fields)
        self.field1 = {}  # placeholder for the check below
        for name in fields:
            if name in self.__dict__:
                raise KeyError(f'Input name {name} already in object dict')
            self.__dict__[name] = map_maker()
        self.field1 = self.__dict__[fields[0]]
        self.add_codes(codes)

    def add_codes(self, code_syn_seqs):
        """Add codes to object

        Parameters
        ----------
        code_syn_seqs : sequence
            sequence of sequences, each giving values in the same order as
            ``self.fields``, and perhaps extra aliases after those.
        """
        for code_syns in code_syn_seqs:
            for alias in code_syns:
                for field_ind, field_name in enumerate(self.fields):
                    self.__dict__[field_name][alias] = code_syns[field_ind]

    def __getitem__(self, key):
        return self.field1[key]

    def __contains__(self, key):
        try:
            self.field1[key]
        except KeyError:
            return False
        return True

    def keys(self):
        """Return all available code and alias values"""
        return self.field1.keys()

    def value_set(self, name=None):
        """Return set of possible returned values for column `name`

        By default, the column is the first column.

        >>> codes = ((1, 'one'), (2, 'two'), (1, 'repeat value'))
        >>> Recoder(codes).value_set() == {1, 2}
        True
        """
        if name is None:
            d = self.field1
        else:
            d = self.__dict__[name]
        return set(d.values())


# Endian code aliases
endian_codes = Recoder(_endian_codes)


class DtypeMapper(object):
    """Mapping that also finds numpy dtype keys by equality

    Dtypes comparing equal do not always hash equal, so after a failed hash
    lookup we compare `key` against all stored dtype keys.
    """

    def __init__(self):
        self._dict = {}
        self._dtype_keys = []

    def keys(self):
        return self._dict.keys()

    def values(self):
        return self._dict.values()

    def __setitem__(self, key, value):
        self._dict[key] = value
        if hasattr(key, 'subdtype'):
            self._dtype_keys.append(key)

    def __getitem__(self, key):
        try:
            return self._dict[key]
        except (KeyError, TypeError):
            pass
        if hasattr(key, 'subdtype'):
            for dt in self._dtype_keys:
                if key == dt:
                    return self._dict[dt]
        raise KeyError(key)


def make_dt_codes(codes_seqs):
    """Create full data type Recoder from (code, label, type, niistring)

    The returned recoder also knows the native and swapped numpy dtypes of each
    type, in fields ``dtype`` and ``sw_dtype``.  Types that have no numpy
    representation are given as ``None`` and get ``None`` dtypes.
    """
    fields = ['code', 'label', 'type', 'niistring']
    dt_codes = []
    for seq in codes_seqs:
        if len(seq) != len(fields):
            raise ValueError('Sequences must all have length 4')
        np_type = seq[2]
        if np_type is None:
            dt_codes.append(list(seq) + [None, None])
            continue
        this_dt = np.dtype(np_type)
        dt_codes.append(list(seq) + [this_dt,
                                     this_dt.newbyteorder(swapped_code)])
    return Recoder(dt_codes, fields + ['dtype', 'sw_dtype'], DtypeMapper)


def pretty_mapping(mapping, getterfunc=None):
    """Make pretty string from mapping

    Adjusts text column to print values on basis of longest key.

    Parameters
    ----------
    mapping : mapping
       implementing iterator returning keys and .items()
    getterfunc : None or callable
       callable taking two arguments, ``obj`` and ``key`` where ``obj``
       is the passed mapping.  If None, just use ``lambda obj, key:
       obj[key]``

    Returns
    -------
    str : string

    Examples
    --------
    >>> d = {'magic': b'n+1', 'vox_offset': 352.0}
    >>> print(pretty_mapping(d))
    magic       : b'n+1'
    vox_offset  : 352.0
    """
    if getterfunc is None:
        getterfunc = lambda obj, key: obj[key]
    lens = [len(str(name)) for name in mapping]
    mxlen = np.max(lens)
    fmt = '%%-%ds  : %%s' % mxlen
    out = []
    for name in mapping:
        value = getterfunc(mapping, name)
        out.append(fmt % (name, value))
    return '\n'.join(out)


def read_exact(fileobj, n_bytes, what='data'):
    """Read exactly `n_bytes` from `fileobj`, or raise ``NiftiIOError``

    Short reads are retried until `fileobj` returns no bytes.  Errors from
    `fileobj` are wrapped with the original as cause; running out of bytes is
    reported as an ``EOFError`` cause.

    >>> from io import BytesIO
    >>> read_exact(BytesIO(b'abcdef'), 4)
    b'abcd'
    """
    chunks = []
    n_read = 0
    try:
        while n_read < n_bytes:
            chunk = fileobj.read(n_bytes - n_read)
            if not chunk:
                break
            chunks.append(chunk)
            n_read += len(chunk)
    except (OSError, EOFError) as err:
        raise NiftiIOError(f'failed to read {what}: {err}', err) from err
    if n_read != n_bytes:
        err = EOFError(f'expected {n_bytes} bytes, got {n_read}')
        raise NiftiIOError(
            f"Expected {n_bytes} bytes of {what}, got {n_read} bytes from "
            f"{getattr(fileobj, 'name', 'object')} - could the file be "
            "damaged?", err) from err
    return b''.join(chunks)


def readinto_exact(fileobj, buffer, what='data'):
    """Fill writable `buffer` from `fileobj`, or raise ``NiftiIOError``"""
    view = memoryview(buffer).cast('B')
    n_bytes = len(view)
    n_read = 0
    try:
        while n_read < n_bytes:
            if hasattr(fileobj, 'readinto'):
                n_chunk = fileobj.readinto(view[n_read:])
            else:
                data = fileobj.read(n_bytes - n_read)
                n_chunk = len(data)
                view[n_read:n_read + n_chunk] = data
            if not n_chunk:
                break
            n_read += n_chunk
    except (OSError, EOFError) as err:
        raise NiftiIOError(f'failed to read {what}: {err}', err) from err
    finally:
        view.release()
    if n_read != n_bytes:
        err = EOFError(f'expected {n_bytes} bytes, got {n_read}')
        raise NiftiIOError(
            f'Expected {n_bytes} bytes of {what}, got {n_read} bytes', err
        ) from err
    return buffer


def skip_to(fileobj, offset):
    """Move `fileobj` forward to byte `offset`, reading past any gap

    Reading rather than seeking works on streams that cannot seek.

    >>> from io import BytesIO
    >>> bio = BytesIO(b'abcdef')
    >>> _ = bio.read(1)
    >>> skip_to(bio, 4)
    >>> bio.read()
    b'ef'
    """
    pos = fileobj.tell()
    if pos > offset:
        raise NiftiIOError(f'cannot move back from byte {pos} to {offset}')
    if pos < offset:
        read_exact(fileobj, offset - pos, what='bytes before data')
