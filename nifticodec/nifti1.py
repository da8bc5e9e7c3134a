# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Read / write access to the NIfTI-1 header

NIfTI1 format defined at http://nifti.nimh.nih.gov/nifti-1/

The header is a 348 byte record.  Its byte order is not stored; we take the
header as native if ``dim[0]`` is a valid rank (0 to 7) when read natively,
and as byte-swapped otherwise.  The magic code then says where the voxel data
are: ``n+1`` for data following the header in the same file, after a 4 byte
extender and any extensions (352 bytes before data with no extensions); or
``ni1`` for a detached header, with data in a companion ``.img`` file.
"""
import logging

import numpy as np
import numpy.linalg as npl

from .volumeutils import Recoder, endian_codes, native_code, read_exact
from .wrapstruct import LabeledWrapStruct
from .batteryrunners import Report
from .errors import (HeaderDataError, InvalidFormat, NiftiIOError,
                     UnsupportedDataType)
from .elements import data_type_codes, element_for_code, element_for_dtype
from .shape import Dim, MAX_RANK
from .quaternions import fill_positive, quaternion_to_affine, \
    affine_to_quaternion, QUATERNION_THRESHOLD
from .affines import shape_zoom_affine

logger = logging.getLogger('nifticodec.nifti1')

# nifti1 flat header definition for the 348 bytes of the header
# first number in comments indicates offset in file header in bytes
header_dtd = [
    ('sizeof_hdr', 'i4'),      # 0; must be 348
    ('data_type', 'S10'),      # 4; unused
    ('db_name', 'S18'),        # 14; unused
    ('extents', 'i4'),         # 32; unused
    ('session_error', 'i2'),   # 36; unused
    ('regular', 'S1'),         # 38; unused
    ('dim_info', 'u1'),        # 39; MRI slice ordering code
    ('dim', 'i2', (8,)),       # 40; data array dimensions
    ('intent_p1', 'f4'),       # 56; first intent parameter
    ('intent_p2', 'f4'),       # 60; second intent parameter
    ('intent_p3', 'f4'),       # 64; third intent parameter
    ('intent_code', 'i2'),     # 68; NIFTI intent code
    ('datatype', 'i2'),        # 70; it's the datatype
    ('bitpix', 'i2'),          # 72; number of bits per voxel
    ('slice_start', 'i2'),     # 74; first slice index
    ('pixdim', 'f4', (8,)),    # 76; grid spacings (units below)
    ('vox_offset', 'f4'),      # 108; offset to data in image file
    ('scl_slope', 'f4'),       # 112; data scaling slope
    ('scl_inter', 'f4'),       # 116; data scaling intercept
    ('slice_end', 'i2'),       # 120; last slice index
    ('slice_code', 'u1'),      # 122; slice timing order
    ('xyzt_units', 'u1'),      # 123; units of pixdim[1..4]
    ('cal_max', 'f4'),         # 124; max display intensity
    ('cal_min', 'f4'),         # 128; min display intensity
    ('slice_duration', 'f4'),  # 132; time for 1 slice
    ('toffset', 'f4'),         # 136; time axis shift
    ('glmax', 'i4'),           # 140; unused
    ('glmin', 'i4'),           # 144; unused
    ('descrip', 'S80'),        # 148; any text
    ('aux_file', 'S24'),       # 228; auxiliary filename
    ('qform_code', 'i2'),      # 252; xform code
    ('sform_code', 'i2'),      # 254; xform code
    ('quatern_b', 'f4'),       # 256; quaternion b param
    ('quatern_c', 'f4'),       # 260; quaternion c param
    ('quatern_d', 'f4'),       # 264; quaternion d param
    ('qoffset_x', 'f4'),       # 268; quaternion x shift
    ('qoffset_y', 'f4'),       # 272; quaternion y shift
    ('qoffset_z', 'f4'),       # 276; quaternion z shift
    ('srow_x', 'f4', (4,)),    # 280; 1st row affine transform
    ('srow_y', 'f4', (4,)),    # 296; 2nd row affine transform
    ('srow_z', 'f4', (4,)),    # 312; 3rd row affine transform
    ('intent_name', 'S16'),    # 328; name or meaning of data
    ('magic', 'S4')            # 344; must be 'ni1\0' or 'n+1\0'
]

# Full header numpy dtype
header_dtype = np.dtype(header_dtd)

# Transform (qform, sform) codes
xform_codes = Recoder((  # code, label, niistring
    (0, 'unknown', "NIFTI_XFORM_UNKNOWN"),
    (1, 'scanner', "NIFTI_XFORM_SCANNER_ANAT"),
    (2, 'aligned', "NIFTI_XFORM_ALIGNED_ANAT"),
    (3, 'talairach', "NIFTI_XFORM_TALAIRACH"),
    (4, 'mni', "NIFTI_XFORM_MNI_152")), fields=('code', 'label', 'niistring'))

# unit codes
unit_codes = Recoder((  # code, label
    (0, 'unknown'),
    (1, 'meter'),
    (2, 'mm'),
    (3, 'micron'),
    (8, 'sec'),
    (16, 'msec'),
    (24, 'usec'),
    (32, 'hz'),
    (40, 'ppm'),
    (48, 'rads')), fields=('code', 'label'))

slice_order_codes = Recoder((  # code, label
    (0, 'unknown'),
    (1, 'sequential increasing', 'seq inc'),
    (2, 'sequential decreasing', 'seq dec'),
    (3, 'alternating increasing', 'alt inc'),
    (4, 'alternating decreasing', 'alt dec'),
    (5, 'alternating increasing 2', 'alt inc 2'),
    (6, 'alternating decreasing 2', 'alt dec 2')), fields=('code', 'label'))

# Statistical and other intents; code, label, niistring
intent_codes = Recoder((
    (0, 'none', "NIFTI_INTENT_NONE"),
    (2, 'correlation', "NIFTI_INTENT_CORREL"),
    (3, 't test', "NIFTI_INTENT_TTEST"),
    (4, 'f test', "NIFTI_INTENT_FTEST"),
    (5, 'z score', "NIFTI_INTENT_ZSCORE"),
    (6, 'chi2', "NIFTI_INTENT_CHISQ"),
    (7, 'beta', "NIFTI_INTENT_BETA"),
    (8, 'binomial', "NIFTI_INTENT_BINOM"),
    (9, 'gamma', "NIFTI_INTENT_GAMMA"),
    (10, 'poisson', "NIFTI_INTENT_POISSON"),
    (11, 'normal', "NIFTI_INTENT_NORMAL"),
    (22, 'p value', "NIFTI_INTENT_PVAL"),
    (23, 'log p value', "NIFTI_INTENT_LOGPVAL"),
    (24, 'log10 p value', "NIFTI_INTENT_LOG10PVAL"),
    (1001, 'estimate', "NIFTI_INTENT_ESTIMATE"),
    (1002, 'label', "NIFTI_INTENT_LABEL"),
    (1003, 'neuroname', "NIFTI_INTENT_NEURONAME"),
    (1004, 'general matrix', "NIFTI_INTENT_GENMATRIX"),
    (1005, 'symmetric matrix', "NIFTI_INTENT_SYMMATRIX"),
    (1006, 'displacement vector', "NIFTI_INTENT_DISPVECT"),
    (1007, 'vector', "NIFTI_INTENT_VECTOR"),
    (1008, 'pointset', "NIFTI_INTENT_POINTSET"),
    (1009, 'triangle', "NIFTI_INTENT_TRIANGLE"),
    (1010, 'quaternion', "NIFTI_INTENT_QUATERNION"),
    (1011, 'dimensionless', "NIFTI_INTENT_DIMLESS"),
    (2001, 'time series', "NIFTI_INTENT_TIME_SERIES"),
    (2002, 'node index', "NIFTI_INTENT_NODE_INDEX"),
    (2003, 'rgb vector', "NIFTI_INTENT_RGB_VECTOR"),
    (2004, 'rgba vector', "NIFTI_INTENT_RGBA_VECTOR"),
    (2005, 'shape', "NIFTI_INTENT_SHAPE"),
), fields=('code', 'label', 'niistring'))


class Nifti1Extension(object):
    """One NIfTI-1 header extension: a code and a raw byte payload

    The payload is kept as read, less trailing NUL padding.

    >>> ext = Nifti1Extension('comment', b'hello')
    >>> ext.get_code()
    6
    >>> ext.get_sizeondisk()
    16
    """

    def __init__(self, code, content):
        try:
            self._code = extension_codes.code[code]
        except KeyError:
            # unknown codes are kept, and written back unchanged
            self._code = code
        self._content = content

    def get_code(self):
        """Return the canonical extension type code."""
        return self._code

    def get_content(self):
        """Return the extension content."""
        return self._content

    def get_sizeondisk(self):
        """Return the size of the extension in the NIfTI file

        This is the payload plus 8 bytes for size and code, padded to a
        multiple of 16 bytes.
        """
        size = len(self._content) + 8
        return size + (-size % 16)

    def __repr__(self):
        try:
            code = extension_codes.label[self._code]
        except KeyError:
            code = self._code
        return f'Nifti1Extension({code!r}, {self._content!r})'

    def __eq__(self, other):
        return (self._code, self._content) == (other._code, other._content)

    def __ne__(self, other):
        return not self == other

    def write_to(self, fileobj, byteswap):
        """Write extension to `fileobj` at the current file position

        Parameters
        ----------
        fileobj : file-like object
           Should implement ``write`` method
        byteswap : boolean
          Flag if byteswapping the data is required.
        """
        rawsize = self.get_sizeondisk()
        extinfo = np.array((rawsize, self._code), dtype=np.int32)
        if byteswap:
            extinfo = extinfo.byteswap()
        fileobj.write(extinfo.tobytes())
        fileobj.write(self._content)
        # zero pad to the next 16 byte border
        fileobj.write(b'\x00' * (rawsize - 8 - len(self._content)))


# NIfTI header extension type codes (ECODE)
# see nifti1_io.h for a complete list of all known extensions and
# references to their description or contacts of the respective
# initiators
extension_codes = Recoder((
    (0, "ignore", Nifti1Extension),
    (2, "dicom", Nifti1Extension),
    (4, "afni", Nifti1Extension),
    (6, "comment", Nifti1Extension),
    (8, "xcede", Nifti1Extension),
    (10, "jimdiminfo", Nifti1Extension),
    (12, "workflow_fwds", Nifti1Extension),
    (14, "freesurfer", Nifti1Extension),
    (16, "pypickle", Nifti1Extension)
),
    fields=('code', 'label', 'handler'))


class Nifti1Extensions(list):
    """Simple extension collection, implemented as a list-subclass.
    """

    def count(self, ecode):
        """Returns the number of extensions matching a given *ecode*.

        Parameters
        ----------
        code : int | str
            The ecode can be specified either literal or as numerical value.
        """
        code = extension_codes.code[ecode]
        return len([e for e in self if e.get_code() == code])

    def get_codes(self):
        """Return a list of the extension code of all available extensions"""
        return [e.get_code() for e in self]

    def get_sizeondisk(self):
        """Return the size of all extensions in the NIfTI file"""
        return sum(e.get_sizeondisk() for e in self)

    def __repr__(self):
        return f"Nifti1Extensions({', '.join(str(e) for e in self)})"

    def write_to(self, fileobj, byteswap):
        """Write all extensions to `fileobj` at the current file position"""
        for e in self:
            e.write_to(fileobj, byteswap)

    @classmethod
    def from_fileobj(klass, fileobj, size, byteswap):
        """Read header extensions from a fileobj

        Parameters
        ----------
        fileobj : file-like object
            We begin reading the extensions at the current file position
        size : int
            Number of bytes to read. If negative, fileobj will be read till its
            end.
        byteswap : boolean
            Flag if byteswapping the read data is required.

        Returns
        -------
        An extension list. This list might be empty in case not extensions
        were present in fileobj.
        """
        extensions = klass()
        # each extension is a multiple of 16 bytes; a detached header file
        # may also just end
        while size >= 16 or size < 0:
            ext_def = fileobj.read(8)
            if not len(ext_def) and size < 0:
                break
            if not len(ext_def) == 8:
                raise HeaderDataError('failed to read extension header')
            ext_def = np.frombuffer(ext_def, dtype=np.int32)
            if byteswap:
                ext_def = ext_def.byteswap()
            esize, ecode = int(ext_def[0]), int(ext_def[1])
            if esize < 8:
                raise HeaderDataError(f'extension size {esize} is too small')
            if esize % 16:
                logger.warning('Extension size is not a multiple of 16 bytes; '
                               'assuming size is correct')
            # esize includes the 8 bytes already read
            try:
                evalue = read_exact(fileobj, esize - 8, what='extension')
            except NiftiIOError as err:
                raise HeaderDataError('failed to read extension content') \
                    from err
            size -= esize
            evalue = evalue.rstrip(b'\x00')
            try:
                ext = extension_codes.handler[ecode](ecode, evalue)
            except KeyError:
                ext = Nifti1Extension(ecode, evalue)
            extensions.append(ext)
        return extensions


class Nifti1Header(LabeledWrapStruct):
    """Class for NIfTI1 header

    The same class holds single file (``n+1``) and detached (``ni1``)
    headers; :meth:`is_single_file` tells them apart by the magic code.

    Examples
    --------
    >>> hdr = Nifti1Header()
    >>> hdr['magic']
    array(b'n+1', dtype='|S4')
    >>> hdr.get_vox_offset()
    352
    >>> hdr.set_data_shape((2, 3, 4))
    >>> hdr.set_data_dtype(np.uint8)
    >>> hdr.get_dim()
    Dim.from_sequence((2, 3, 4))
    >>> hdr.get_data_type()
    DataElement(2, 'uint8')
    """
    template_dtype = header_dtype

    # fields with recoders for their values
    _field_recoders = {'datatype': data_type_codes,
                       'qform_code': xform_codes,
                       'sform_code': xform_codes,
                       'intent_code': intent_codes,
                       'slice_code': slice_order_codes}

    # Extension class; should implement __call__ for construction, and
    # ``from_fileobj`` for reading from file
    exts_klass = Nifti1Extensions

    sizeof_hdr = 348

    # Offset of data in single file with no extensions
    single_vox_offset = 352

    # Magics for single and pair
    pair_magic = b'ni1'
    single_magic = b'n+1'

    # Quaternion threshold near 0, based on float32 precision
    quaternion_threshold = QUATERNION_THRESHOLD

    # Flip x for affines from shape and zooms
    default_x_flip = True

    def __init__(self,
                 binaryblock=None,
                 endianness=None,
                 check=True,
                 extensions=()):
        """Initialize header from binary data block and extensions

        Parameters
        ----------
        binaryblock : {None, bytes} optional
            348 bytes of header.  None gives the default header.
        endianness : {None, '<', '>', other endian code}, optional
            byte order of `binaryblock`.  None means guess it from ``dim[0]``.
        check : bool, optional
            Whether to check the header.  A bad magic code raises
            ``InvalidFormat``; other problems are logged.
        extensions : sequence, optional
            :class:`Nifti1Extension` instances for this header
        """
        super(Nifti1Header, self).__init__(binaryblock, endianness, check)
        self.extensions = self.exts_klass(extensions)

    def copy(self):
        """Return copy of header

        Take reference to extensions as well as copy of header contents
        """
        return self.__class__(
            self.binaryblock,
            self.endianness,
            False,
            self.extensions)

    @classmethod
    def from_fileobj(klass, fileobj, endianness=None, check=True):
        """Read header, extender and extensions from `fileobj`

        Reading leaves `fileobj` after the last extension.  For a single file
        this may still be before ``vox_offset``.

        Parameters
        ----------
        fileobj : file-like object
           Needs to implement ``read`` method
        endianness : None or endian code, optional
           Code specifying byte order of read data
        check : bool, optional
           Whether to run the header checks.

        Raises
        ------
        InvalidFormat
           If the magic code is not ``ni1`` or ``n+1`` and `check` is True
        NiftiIOError
           If `fileobj` ends within the header, or the 4 byte extender of a
           single file header
        """
        raw_str = read_exact(fileobj, klass.template_dtype.itemsize,
                             what='header')
        hdr = klass(raw_str, endianness, check)
        logger.debug('read header, byte order %r', hdr.endianness)
        # The 4 byte extender; if the first byte is not zero, we have
        # extensions.  A detached header may leave it out.
        if hdr.is_single_file():
            extension_status = read_exact(fileobj, 4, what='extender')
        else:
            extension_status = fileobj.read(4)
        if len(extension_status) < 4 or extension_status[0:1] == b'\x00':
            return hdr
        if hdr.is_single_file():
            extsize = max(hdr.get_vox_offset() - klass.single_vox_offset, 0)
        else:
            # detached header file; read to end
            extsize = -1
        byteswap = endian_codes['native'] != hdr.endianness
        hdr.extensions = klass.exts_klass.from_fileobj(fileobj, extsize,
                                                       byteswap)
        return hdr

    def write_to(self, fileobj):
        """Write header, extender and extensions to `fileobj`

        The header fields go out as stored, ``vox_offset`` included, so a
        parsed header writes back to the same bytes.
        """
        super(Nifti1Header, self).write_to(fileobj)
        if len(self.extensions) == 0:
            # If single file, write required 0 stream to signal no extensions
            if self.is_single_file():
                fileobj.write(b'\x00' * 4)
            return
        # Signal there are extensions that follow
        fileobj.write(b'\x01\x00\x00\x00')
        byteswap = endian_codes['native'] != self.endianness
        self.extensions.write_to(fileobj, byteswap)

    @classmethod
    def guessed_endian(klass, hdr):
        """Guess intended byte order from mapping-like `hdr`

        ``dim[0]`` should be between 0 and 7.  If it is, read natively, the
        header is native, otherwise it is swapped.

        Examples
        --------
        >>> hdr_data = np.zeros((), dtype=header_dtype)
        >>> Nifti1Header.guessed_endian(hdr_data) == native_code
        True
        >>> hdr_data['dim'][0] = 3
        >>> sw_hdr_data = hdr_data.byteswap()
        >>> Nifti1Header.guessed_endian(sw_hdr_data) == native_code
        False
        """
        if 0 <= hdr['dim'][0] <= MAX_RANK:
            return native_code
        return endian_codes['swapped']

    @classmethod
    def default_structarr(klass, endianness=None):
        """Create default header record with given byte order"""
        hdr_data = super(Nifti1Header, klass).default_structarr(endianness)
        hdr_data['sizeof_hdr'] = klass.sizeof_hdr
        hdr_data['dim'] = [1, 0, 0, 0, 0, 0, 0, 0]
        hdr_data['pixdim'] = 1
        hdr_data['vox_offset'] = klass.single_vox_offset
        hdr_data['qform_code'] = 1
        hdr_data['sform_code'] = 1
        hdr_data['srow_x'] = [1, 0, 0, 0]
        hdr_data['srow_y'] = [0, 1, 0, 0]
        hdr_data['srow_z'] = [0, 0, 1, 0]
        hdr_data['magic'] = klass.single_magic
        return hdr_data

    def is_single_file(self):
        """True if the voxel data follow the header in the same file"""
        return self._structarr['magic'].item() == self.single_magic

    def get_vox_offset(self):
        """Offset of voxel data in the data file, as an int

        ``vox_offset`` is stored as float32; we round to the nearest integer.
        """
        offset = float(self._structarr['vox_offset'])
        if not np.isfinite(offset) or offset < 0:
            raise HeaderDataError(f'invalid vox_offset {offset}')
        return int(round(offset))

    def get_dim(self):
        """Validated volume shape as a :class:`~nifticodec.shape.Dim`

        Raises ``InconsistentDim`` for a rank outside 1 to 7, or a used extent
        that is not positive.
        """
        return Dim(self._structarr['dim'])

    def get_data_shape(self):
        """Get shape of data, without validation

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> hdr.get_data_shape()
        (0,)
        >>> hdr.set_data_shape((1,2,3))
        >>> hdr.get_data_shape()
        (1, 2, 3)
        """
        dims = self._structarr['dim']
        ndims = int(dims[0])
        return tuple(int(d) for d in dims[1:ndims + 1])

    def set_data_shape(self, shape):
        """Set shape of data

        Unused entries of ``dim`` are set to 1, and unused zooms to 1.0.

        Parameters
        ----------
        shape : sequence
           sequence of integers specifying data array shape
        """
        dims = self._structarr['dim']
        shape = tuple(int(s) for s in shape)
        ndims = len(shape)
        if not 1 <= ndims <= MAX_RANK:
            raise HeaderDataError(f'NIfTI-1 needs 1 to {MAX_RANK} dimensions, '
                                  f'not {ndims}')
        if not all(0 <= s <= np.iinfo(dims.dtype).max for s in shape):
            raise HeaderDataError(f'shape {shape} does not fit in dim datatype')
        dims[:] = 1
        dims[0] = ndims
        dims[1:ndims + 1] = shape
        self._structarr['pixdim'][ndims + 1:] = 1.0

    def get_data_type(self):
        """Return :class:`~nifticodec.elements.DataElement` for ``datatype``

        Raises ``UnsupportedDataType`` for codes we cannot read.
        """
        return element_for_code(int(self._structarr['datatype']))

    def get_data_dtype(self):
        """Numpy dtype of stored data, with the header byte order"""
        return self.get_data_type().dtype_for(self.endianness)

    def set_data_dtype(self, datatype):
        """Set ``datatype`` and ``bitpix`` from code, label or numpy type

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> hdr.set_data_dtype(np.int16)
        >>> int(hdr['datatype']), int(hdr['bitpix'])
        (4, 16)
        >>> hdr.set_data_dtype('float32')
        >>> hdr.get_data_dtype() == np.dtype(np.float32).newbyteorder('=')
        True
        >>> hdr.set_data_dtype('RGB')
        Traceback (most recent call last):
           ...
        nifticodec.errors.UnsupportedDataType: unsupported data type code 128
        """
        try:
            element = element_for_code(datatype)
        except UnsupportedDataType as err:
            try:
                dtype = np.dtype(datatype)
            except TypeError:
                raise err
            if dtype.fields or dtype.kind == 'V':
                raise err
            element = element_for_dtype(dtype)
        self._structarr['datatype'] = element.code
        self._structarr['bitpix'] = element.bitpix

    def get_zooms(self):
        """Get zooms (voxel sizes) from header, one per dimension

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> hdr.set_data_shape((1,2))
        >>> hdr.get_zooms()
        (1.0, 1.0)
        >>> hdr.set_zooms((3, 4))
        >>> hdr.get_zooms()
        (3.0, 4.0)
        """
        hdr = self._structarr
        ndim = int(hdr['dim'][0])
        if ndim == 0:
            return (1.0,)
        return tuple(float(p) for p in hdr['pixdim'][1:ndim + 1])

    def set_zooms(self, zooms):
        """Set zooms into header fields

        See docstring for ``get_zooms`` for examples
        """
        hdr = self._structarr
        ndim = int(hdr['dim'][0])
        zooms = np.asarray(zooms)
        if len(zooms) != ndim:
            raise HeaderDataError(f'Expecting {ndim} zoom values for ndim '
                                  f'{ndim}')
        if np.any(zooms < 0):
            raise HeaderDataError('zooms must be positive')
        hdr['pixdim'][1:ndim + 1] = zooms[:]

    def get_slope_inter(self):
        """Get stored ``scl_slope`` and ``scl_inter`` as floats

        A slope of 0 means the data are not scaled.

        >>> hdr = Nifti1Header()
        >>> hdr.get_slope_inter()
        (0.0, 0.0)
        """
        return float(self['scl_slope']), float(self['scl_inter'])

    def set_slope_inter(self, slope, inter=0.0):
        """Set data scaling so that scaled data are ``data * slope + inter``

        A `slope` of 0 turns scaling off.

        >>> hdr = Nifti1Header()
        >>> hdr.set_slope_inter(2, 10)
        >>> hdr.get_slope_inter()
        (2.0, 10.0)
        """
        if not np.isfinite(slope):
            raise HeaderDataError('Slope cannot be infinite or NaN')
        if not np.isfinite(inter):
            raise HeaderDataError('Intercept cannot be infinite or NaN')
        self._structarr['scl_slope'] = slope
        self._structarr['scl_inter'] = inter

    def get_xyzt_units(self):
        """Return labels for the spatial and time units of ``pixdim``

        >>> hdr = Nifti1Header()
        >>> hdr.set_xyzt_units('mm', 'sec')
        >>> hdr.get_xyzt_units()
        ('mm', 'sec')
        """
        code = int(self._structarr['xyzt_units'])
        xyz_code = code % 8
        t_code = code - xyz_code
        return (unit_codes.label[xyz_code],
                unit_codes.label[t_code])

    def set_xyzt_units(self, xyz=None, t=None):
        if xyz is None:
            xyz = 0
        if t is None:
            t = 0
        self._structarr['xyzt_units'] = unit_codes[xyz] + unit_codes[t]

    def get_qform_quaternion(self):
        """Compute quaternion from b, c, d of quaternion

        Fills a value by assuming this is a unit quaternion
        """
        hdr = self._structarr
        bcd = [hdr['quatern_b'], hdr['quatern_c'], hdr['quatern_d']]
        # Adjust threshold to precision of stored values in header
        return fill_positive(bcd, self.quaternion_threshold)

    def get_qform(self, coded=False):
        """Return 4x4 affine matrix from qform parameters in header

        Parameters
        ----------
        coded : bool, optional
            If True, return {affine or None}, and qform code.  If False, just
            return affine.  {affine or None} means, return None if qform code
            == 0, and affine otherwise.

        Raises
        ------
        HeaderDataError
            If ``pixdim[1:4]`` has negative values, or ``pixdim[0]`` (qfac) is
            not 1 or -1
        """
        hdr = self._structarr
        code = int(hdr['qform_code'])
        if code == 0 and coded:
            return None, 0
        quat = self.get_qform_quaternion()
        R = quaternion_to_affine(quat)
        vox = hdr['pixdim'][1:4].astype(np.float64)
        if np.any(vox < 0):
            raise HeaderDataError('pixdims[1,2,3] should be positive')
        qfac = hdr['pixdim'][0]
        if qfac not in (-1, 1):
            raise HeaderDataError('qfac (pixdim[0]) should be 1 or -1')
        vox[-1] *= qfac
        out = np.eye(4)
        out[0:3, 0:3] = np.dot(R, np.diag(vox))
        out[0:3, 3] = [hdr['qoffset_x'], hdr['qoffset_y'], hdr['qoffset_z']]
        if coded:
            return out, code
        return out

    def set_qform(self, affine, code=None, strip_shears=True):
        """Set qform header values from 4x4 affine

        Parameters
        ----------
        affine : None or 4x4 array
            affine transform to write into qform. If None, only set code.
        code : None, string or integer, optional
            String or integer giving meaning of transform in *affine*.
            If None, then 0 when `affine` is None, otherwise keep the
            existing code, or use 2 (aligned) if the existing code is 0.
        strip_shears : bool, optional
            Whether to strip shears in `affine`.  If True, shears will be
            silently stripped. If False, the presence of shears will raise a
            ``HeaderDataError``

        Notes
        -----
        The qform only encodes translations, rotations and zooms.  With
        `strip_shears`, the written qform uses the closest orthogonal
        rotation to that in `affine`.

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> affine = np.diag([1,2,3,1])
        >>> hdr.set_qform(affine)
        >>> np.all(hdr.get_qform() == affine)
        True
        >>> int(hdr['qform_code'])
        1
        >>> hdr.set_qform(affine, code='talairach')
        >>> int(hdr['qform_code'])
        3
        >>> hdr.set_qform(None)
        >>> int(hdr['qform_code'])
        0
        """
        hdr = self._structarr
        old_code = int(hdr['qform_code'])
        if code is None:
            if affine is None:
                code = 0
            elif old_code == 0:
                code = 2  # aligned
            else:
                code = old_code
        else:
            code = self._field_recoders['qform_code'][code]
        hdr['qform_code'] = code
        if affine is None:
            return
        affine = np.asarray(affine)
        if not affine.shape == (4, 4):
            raise HeaderDataError('Need 4x4 affine as input')
        trans = affine[:3, 3]
        RZS = affine[:3, :3]
        zooms = np.sqrt(np.sum(RZS * RZS, axis=0))
        R = RZS / zooms
        # Set qfac to make R determinant positive
        if npl.det(R) > 0:
            qfac = 1
        else:
            qfac = -1
            R[:, -1] *= -1
        # Polar decomposition, giving the closest orthogonal matrix PR to R
        P, S, Qs = npl.svd(R)
        PR = np.dot(P, Qs)
        if not strip_shears and not np.allclose(PR, R):
            raise HeaderDataError("Shears in affine and `strip_shears` is "
                                  "False")
        quat = affine_to_quaternion(PR)
        hdr['qoffset_x'], hdr['qoffset_y'], hdr['qoffset_z'] = trans
        hdr['pixdim'][0] = qfac
        hdr['pixdim'][1:4] = zooms
        hdr['quatern_b'], hdr['quatern_c'], hdr['quatern_d'] = quat[1:]

    def get_sform(self, coded=False):
        """Return 4x4 affine matrix from sform parameters in header

        Parameters
        ----------
        coded : bool, optional
            If True, return {affine or None}, and sform code.  If False, just
            return affine.  {affine or None} means, return None if sform code
            == 0, and affine otherwise.
        """
        hdr = self._structarr
        code = int(hdr['sform_code'])
        if code == 0 and coded:
            return None, 0
        out = np.eye(4)
        out[0, :] = hdr['srow_x'][:]
        out[1, :] = hdr['srow_y'][:]
        out[2, :] = hdr['srow_z'][:]
        if coded:
            return out, code
        return out

    def set_sform(self, affine, code=None):
        """Set sform transform from 4x4 affine

        `code` as for :meth:`set_qform`.

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> affine = np.diag([1,2,3,1])
        >>> hdr.set_sform(affine, code='scanner')
        >>> np.all(hdr.get_sform() == affine)
        True
        >>> int(hdr['sform_code'])
        1
        """
        hdr = self._structarr
        old_code = int(hdr['sform_code'])
        if code is None:
            if affine is None:
                code = 0
            elif old_code == 0:
                code = 2  # aligned
            else:
                code = old_code
        else:
            code = self._field_recoders['sform_code'][code]
        hdr['sform_code'] = code
        if affine is None:
            return
        affine = np.asarray(affine)
        if not affine.shape == (4, 4):
            raise HeaderDataError('Need 4x4 affine as input')
        hdr['srow_x'][:] = affine[0, :]
        hdr['srow_y'][:] = affine[1, :]
        hdr['srow_z'][:] = affine[2, :]

    def get_base_affine(self):
        """Get affine from shape and zooms alone

        Note that we get the translations from the center of the
        image.

        Examples
        --------
        >>> hdr = Nifti1Header()
        >>> hdr.set_data_shape((3, 5, 7))
        >>> hdr.set_zooms((3, 2, 1))
        >>> hdr.get_base_affine() # from center of image
        array([[-3.,  0.,  0.,  3.],
               [ 0.,  2.,  0., -4.],
               [ 0.,  0.,  1., -3.],
               [ 0.,  0.,  0.,  1.]])
        """
        hdr = self._structarr
        ndim = int(hdr['dim'][0])
        return shape_zoom_affine(hdr['dim'][1:ndim + 1],
                                 hdr['pixdim'][1:ndim + 1],
                                 self.default_x_flip)

    def get_best_affine(self):
        """Select best of available transforms

        The sform if ``sform_code`` is not 0, otherwise the qform if
        ``qform_code`` is not 0, otherwise the affine from shape and zooms.
        """
        hdr = self._structarr
        if hdr['sform_code'] != 0:
            return self.get_sform()
        if hdr['qform_code'] != 0:
            return self.get_qform()
        return self.get_base_affine()

    def set_affine(self, affine):
        """Set `affine` as sform with code 'aligned' and as qform with code
        'unknown'
        """
        self.set_sform(affine, code='aligned')
        self.set_qform(affine, code='unknown')

    """ Checks only below here """

    @classmethod
    def _get_checks(klass):
        return (klass._chk_sizeof_hdr,
                klass._chk_datatype,
                klass._chk_bitpix,
                klass._chk_pixdims,
                klass._chk_qfac,
                klass._chk_magic,
                klass._chk_offset,
                klass._chk_qform_code,
                klass._chk_sform_code)

    @classmethod
    def _chk_sizeof_hdr(klass, hdr, fix=False):
        rep = Report(HeaderDataError)
        if hdr['sizeof_hdr'] == klass.sizeof_hdr:
            return hdr, rep
        rep.problem_level = 30
        rep.problem_msg = f'sizeof_hdr should be {klass.sizeof_hdr}'
        if fix:
            hdr['sizeof_hdr'] = klass.sizeof_hdr
            rep.fix_msg = f'set sizeof_hdr to {klass.sizeof_hdr}'
        return hdr, rep

    @staticmethod
    def _chk_datatype(hdr, fix=False):
        # Unsupported types raise when the data are read, not here
        rep = Report(HeaderDataError)
        code = int(hdr['datatype'])
        try:
            element_for_code(code)
        except UnsupportedDataType:
            rep.problem_level = 30
            rep.problem_msg = f'data code {code} not supported'
            if fix:
                rep.fix_msg = 'not attempting fix'
        return hdr, rep

    @staticmethod
    def _chk_bitpix(hdr, fix=False):
        rep = Report(HeaderDataError)
        code = int(hdr['datatype'])
        try:
            dt = data_type_codes.dtype[code]
        except KeyError:
            rep.problem_level = 10
            rep.problem_msg = 'no valid datatype to fix bitpix'
            if fix:
                rep.fix_msg = 'no way to fix bitpix'
            return hdr, rep
        bitpix = dt.itemsize * 8
        if bitpix == hdr['bitpix']:
            return hdr, rep
        rep.problem_level = 10
        rep.problem_msg = 'bitpix does not match datatype'
        if fix:
            hdr['bitpix'] = bitpix
            rep.fix_msg = 'setting bitpix to match datatype'
        return hdr, rep

    @staticmethod
    def _chk_pixdims(hdr, fix=False):
        rep = Report(HeaderDataError)
        pixdims = hdr['pixdim']
        spat_dims = pixdims[1:4]
        if not np.any(spat_dims <= 0):
            return hdr, rep
        neg_dims = spat_dims < 0
        zero_dims = spat_dims == 0
        pmsgs = []
        fmsgs = []
        if np.any(zero_dims):
            pmsgs.append('pixdim[1,2,3] should be non-zero')
            if fix:
                spat_dims[zero_dims] = 1
                fmsgs.append('setting 0 dims to 1')
        if np.any(neg_dims):
            pmsgs.append('pixdim[1,2,3] should be positive')
            if fix:
                spat_dims = np.abs(spat_dims)
                fmsgs.append('setting to abs of pixdim values')
        rep.problem_level = 30
        rep.problem_msg = ' and '.join(pmsgs)
        if fix:
            pixdims[1:4] = spat_dims
            rep.fix_msg = ' and '.join(fmsgs)
        return hdr, rep

    @staticmethod
    def _chk_qfac(hdr, fix=False):
        rep = Report(HeaderDataError)
        if hdr['pixdim'][0] in (-1, 1):
            return hdr, rep
        rep.problem_level = 20
        rep.problem_msg = 'pixdim[0] (qfac) should be 1 (default) or -1'
        if fix:
            hdr['pixdim'][0] = 1
            rep.fix_msg = 'setting qfac to 1'
        return hdr, rep

    @staticmethod
    def _chk_magic(hdr, fix=False):
        rep = Report(InvalidFormat)
        magic = hdr['magic'].item()
        if magic in (hdr.pair_magic, hdr.single_magic):
            return hdr, rep
        rep.problem_msg = f'magic string {magic!r} is not valid'
        rep.problem_level = 45
        if fix:
            rep.fix_msg = 'leaving as is, but future errors are likely'
        return hdr, rep

    @staticmethod
    def _chk_offset(hdr, fix=False):
        rep = Report(HeaderDataError)
        magic = hdr['magic'].item()
        offset = float(hdr['vox_offset'])
        if offset == 0:
            return hdr, rep
        if magic == hdr.single_magic and offset < hdr.single_vox_offset:
            rep.problem_level = 30
            rep.problem_msg = (f'vox offset {int(offset)} too low for '
                               'single file nifti1')
            if fix:
                hdr['vox_offset'] = hdr.single_vox_offset
                rep.fix_msg = ('setting to minimum value of '
                               f'{hdr.single_vox_offset}')
            return hdr, rep
        if not offset % 16:
            return hdr, rep
        # SPM uses memory mapping to read the data, and
        # apparently this has to start on 16 byte boundaries
        rep.problem_msg = (f'vox offset (={offset:g}) not divisible '
                           'by 16, not SPM compatible')
        rep.problem_level = 30
        if fix:
            rep.fix_msg = 'leaving at current value'
        return hdr, rep

    @classmethod
    def _chk_qform_code(klass, hdr, fix=False):
        return klass._chk_xform_code('qform_code', hdr, fix)

    @classmethod
    def _chk_sform_code(klass, hdr, fix=False):
        return klass._chk_xform_code('sform_code', hdr, fix)

    @classmethod
    def _chk_xform_code(klass, code_type, hdr, fix):
        # utility method for sform and qform codes
        rep = Report(HeaderDataError)
        code = int(hdr[code_type])
        recoder = klass._field_recoders[code_type]
        if code in recoder.value_set():
            return hdr, rep
        rep.problem_level = 30
        rep.problem_msg = f'{code_type} {code} not valid'
        if fix:
            hdr[code_type] = 0
            rep.fix_msg = 'setting to 0'
        return hdr, rep

    @classmethod
    def may_contain_header(klass, binaryblock):
        """True if `binaryblock` starts with a NIfTI-1 magic at byte 344"""
        if len(binaryblock) < klass.sizeof_hdr:
            return False
        hdr_struct = np.ndarray(shape=(), dtype=header_dtype,
                                buffer=binaryblock[:klass.sizeof_hdr])
        return hdr_struct['magic'].item() in (klass.pair_magic,
                                              klass.single_magic)
