# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Fixed-size binary records backed by a numpy structured array

:class:`WrapStruct` holds one record of a structured dtype, such as the 348
byte NIfTI-1 header.  It gives:

* field access with ``record['field']`` and the usual mapping methods
* reading from and writing to file-like objects
* byte order detection on read, and byte swapped copies
* a battery of consistency checks, run on read

Reading never changes the bytes it was given; the checks only log, or raise
for problems at or above ``imageglobals.error_level``.  Call
:meth:`WrapStruct.check_fix` to apply the fixes the checks know about.

:class:`LabeledWrapStruct` adds printable labels for coded fields.
"""
import numpy as np

from .volumeutils import (pretty_mapping, endian_codes, native_code,
                          swapped_code, read_exact)
from . import imageglobals as imageglobals
from .batteryrunners import BatteryRunner
from .errors import InvalidFormat


class WrapStruct(object):
    # placeholder record type; subclasses set their own
    template_dtype = np.dtype([('integer', 'i2')])

    def __init__(self,
                 binaryblock=None,
                 endianness=None,
                 check=True):
        """Initialize from binary data block

        Parameters
        ----------
        binaryblock : {None, bytes} optional
            binary block to set into object.  By default, None, in
            which case we insert the default record
        endianness : {None, '<','>', other endian code} string, optional
            byte order of `binaryblock`.  If None, guess the byte order
            from the data.
        check : bool, optional
            Whether to run the checks on the record.  Checks log any
            problems, and raise for problems at or above the error level.
            They do not change the record.  Default is True.

        Examples
        --------
        >>> wstr1 = WrapStruct() # a default structure
        >>> wstr1.endianness == native_code
        True
        >>> int(wstr1['integer'])
        0
        >>> wstr1['integer'] = 1
        >>> int(wstr1['integer'])
        1
        """
        if binaryblock is None:
            self._structarr = self.__class__.default_structarr(endianness)
            return
        if len(binaryblock) != self.template_dtype.itemsize:
            raise InvalidFormat(
                f'Binary block is {len(binaryblock)} bytes, expecting '
                f'{self.template_dtype.itemsize}')
        wstr = np.ndarray(shape=(), dtype=self.template_dtype,
                          buffer=binaryblock)
        if endianness is None:
            endianness = self.__class__.guessed_endian(wstr)
        else:
            endianness = endian_codes[endianness]
        if endianness != native_code:
            dt = self.template_dtype.newbyteorder(endianness)
            wstr = np.ndarray(shape=(), dtype=dt, buffer=binaryblock)
        self._structarr = wstr.copy()
        if check:
            self.check_only()

    @classmethod
    def from_fileobj(klass, fileobj, endianness=None, check=True):
        """Return record read from `fileobj` with given or guessed byte order

        Parameters
        ----------
        fileobj : file-like object
           Needs to implement ``read`` method
        endianness : None or endian code, optional
           Code specifying byte order of read data
        check : bool, optional
           Whether to run the checks on the read record.

        Returns
        -------
        wstr : WrapStruct object
           WrapStruct object initialized from data in fileobj

        Raises
        ------
        NiftiIOError
           If `fileobj` ends before the whole record is read
        """
        raw_str = read_exact(fileobj, klass.template_dtype.itemsize,
                             what='header')
        return klass(raw_str, endianness, check)

    @property
    def binaryblock(self):
        """Record as bytes, in the current byte order

        Examples
        --------
        >>> wstr = WrapStruct()
        >>> len(wstr.binaryblock)
        2
        """
        return self._structarr.tobytes()

    def write_to(self, fileobj):
        """Write record to `fileobj` at the current file position

        Examples
        --------
        >>> wstr = WrapStruct()
        >>> from io import BytesIO
        >>> str_io = BytesIO()
        >>> wstr.write_to(str_io)
        >>> wstr.binaryblock == str_io.getvalue()
        True
        """
        fileobj.write(self.binaryblock)

    @property
    def endianness(self):
        """Byte order code of the record, one of '<' or '>'

        Use :meth:`as_byteswapped` to get a record with the other byte order.

        Examples
        --------
        >>> wstr = WrapStruct()
        >>> wstr.endianness == native_code
        True
        """
        if self._structarr.dtype.isnative:
            return native_code
        return swapped_code

    def copy(self):
        """Return copy of record

        >>> wstr = WrapStruct()
        >>> wstr['integer'] = 3
        >>> wstr2 = wstr.copy()
        >>> wstr2 is wstr
        False
        >>> int(wstr2['integer'])
        3
        """
        return self.__class__(self.binaryblock, self.endianness, check=False)

    def __eq__(self, other):
        """Records are equal when their values are, whatever the byte order

        Examples
        --------
        >>> WrapStruct() == WrapStruct(endianness=swapped_code)
        True
        """
        this_end = self.endianness
        this_bb = self.binaryblock
        try:
            other_end = other.endianness
            other_bb = other.binaryblock
        except AttributeError:
            return False
        if this_end == other_end:
            return this_bb == other_bb
        other_bb = other._structarr.byteswap().tobytes()
        return this_bb == other_bb

    def __ne__(self, other):
        return not self == other

    def __getitem__(self, item):
        return self._structarr[item]

    def __setitem__(self, item, value):
        self._structarr[item] = value

    def __iter__(self):
        return iter(self.keys())

    def keys(self):
        """Return field names"""
        return list(self.template_dtype.names)

    def values(self):
        """Return field values"""
        data = self._structarr
        return [data[key] for key in self.template_dtype.names]

    def items(self):
        """Return (name, value) pairs for fields"""
        return zip(self.keys(), self.values())

    def get(self, k, d=None):
        """Return value for field `k` if present or `d` otherwise"""
        return self._structarr[k] if k in self.keys() else d

    def _log_raise(self, reports, logger, error_level):
        if logger is None:
            logger = imageglobals.logger
        if error_level is None:
            error_level = imageglobals.error_level
        for report in reports:
            report.log_raise(logger, error_level)

    def check_only(self, logger=None, error_level=None):
        """Run checks on the record without changing it

        Parameters
        ----------
        logger : None or logging.Logger
            Logger for problem reports.  None means ``imageglobals.logger``.
        error_level : None or int
            Level of problem severity at which to raise error.  None means
            ``imageglobals.error_level``.
        """
        battrun = BatteryRunner(self.__class__._get_checks())
        self._log_raise(battrun.check_only(self), logger, error_level)

    def check_fix(self, logger=None, error_level=None):
        """Run checks on the record, fixing what the checks can fix

        Parameters as for :meth:`check_only`.
        """
        battrun = BatteryRunner(self.__class__._get_checks())
        self, reports = battrun.check_fix(self)
        self._log_raise(reports, logger, error_level)

    @classmethod
    def diagnose_binaryblock(klass, binaryblock, endianness=None):
        """Run checks over binary data, return string of problems found"""
        wstr = klass(binaryblock, endianness=endianness, check=False)
        battrun = BatteryRunner(klass._get_checks())
        reports = battrun.check_only(wstr)
        return '\n'.join([report.message
                          for report in reports if report.message])

    @classmethod
    def guessed_endian(klass, mapping):
        """Guess byte order of record from field values in `mapping`

        Returns
        -------
        endianness : {'<', '>'}
        """
        raise NotImplementedError

    @classmethod
    def default_structarr(klass, endianness=None):
        """Return structured array for default record with given byte order
        """
        dt = klass.template_dtype
        if endianness is not None:
            endianness = endian_codes[endianness]
            dt = dt.newbyteorder(endianness)
        return np.zeros((), dtype=dt)

    @property
    def structarr(self):
        """Structured array holding the record"""
        return self._structarr

    def __str__(self):
        summary = f"{self.__class__} object, endian='{self.endianness}'"
        return '\n'.join([summary, pretty_mapping(self)])

    def as_byteswapped(self, endianness=None):
        """Return new record with byte order `endianness`

        Always returns a copy, even if `endianness` is the current byte
        order.

        Parameters
        ----------
        endianness : None or string, optional
           endian code to which to swap.  None means swap from current
           byte order, and is the default

        Examples
        --------
        >>> wstr = WrapStruct()
        >>> bs_wstr = wstr.as_byteswapped()
        >>> bs_wstr.endianness == swapped_code
        True
        >>> bs_wstr == wstr
        True
        >>> bs_wstr['integer'] = 3
        >>> bs_wstr == wstr
        False
        >>> wstr.as_byteswapped(native_code) is wstr
        False
        """
        current = self.endianness
        if endianness is None:
            endianness = swapped_code if current == native_code else native_code
        else:
            endianness = endian_codes[endianness]
        if endianness == current:
            return self.copy()
        wstr_data = self._structarr.byteswap()
        return self.__class__(wstr_data.tobytes(), endianness, check=False)

    @classmethod
    def _get_checks(klass):
        """Return sequence of check functions for this class"""
        return ()


class LabeledWrapStruct(WrapStruct):
    """A WrapStruct where some fields have printable value labels
    """
    _field_recoders = {}

    def get_value_label(self, fieldname):
        """Return label for the code in coded field `fieldname`

        Raises
        ------
        ValueError
            if field is not coded.

        Examples
        --------
        >>> from nifticodec.volumeutils import Recoder
        >>> recoder = Recoder(((1, 'mm'), (2, 'um')), ('code', 'label'))
        >>> class C(LabeledWrapStruct):
        ...     template_dtype = np.dtype([('xyzt_units', 'i1')])
        ...     _field_recoders = dict(xyzt_units=recoder)
        >>> hdr = C()
        >>> hdr.get_value_label('xyzt_units')
        '<unknown code 0>'
        >>> hdr['xyzt_units'] = 2
        >>> hdr.get_value_label('xyzt_units')
        'um'
        """
        if fieldname not in self._field_recoders:
            raise ValueError(f'{fieldname} not a coded field')
        code = int(self._structarr[fieldname])
        try:
            return self._field_recoders[fieldname].label[code]
        except KeyError:
            return f'<unknown code {code}>'

    def __str__(self):
        summary = f"{self.__class__} object, endian='{self.endianness}'"

        def _getter(obj, key):
            try:
                return obj.get_value_label(key)
            except ValueError:
                return obj[key]

        return '\n'.join([summary, pretty_mapping(self, _getter)])
