# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""NIfTI-1 object: header, extensions and volume together

A NIfTI-1 object is stored either as a single file (``.nii``, magic
``n+1``), where the voxel data follow the header and extensions, or as a
header / image pair (``.hdr`` and ``.img``, magic ``ni1``).  Either may be
gzip compressed.  :class:`NiftiObject` reads both layouts, and can give the
voxel data as one of three volume kinds:

* ``'inmem'`` - read all voxel data now (:class:`InMemNiftiVolume`);
* ``'lazy'`` - read all voxel data on first access (:class:`LazyNiftiVolume`);
* ``'streamed'`` - read slice by slice (:class:`StreamedNiftiVolume`).

A streamed object keeps its file open; close it with :meth:`NiftiObject.close`
or use the object as a context manager.
"""
import logging
import os

from .arrayproxy import LazyNiftiVolume
from .errors import MissingVolumeFile, NoVolumeData
from .filename_parser import img_filenames_for
from .nifti1 import Nifti1Header
from .openers import Opener
from .streamed import StreamedNiftiVolume
from .volume import InMemNiftiVolume

logger = logging.getLogger('nifticodec.image')

#: names of the volume kinds we can make
volume_kinds = ('inmem', 'lazy', 'streamed')


def _check_kind(volume):
    if volume not in volume_kinds:
        raise ValueError(f'volume should be one of {volume_kinds}, '
                         f'not {volume!r}')


def _volume_from(source, header, volume, offset, slice_rank=None,
                 lazy_source=None):
    # `source` is an open Opener at or before `offset`
    if volume == 'inmem':
        return InMemNiftiVolume.from_fileobj(source, header, offset)
    if volume == 'streamed':
        return StreamedNiftiVolume.from_fileobj(source, header, slice_rank,
                                                offset)
    if lazy_source is None:
        lazy_source = source
    return LazyNiftiVolume.from_header(lazy_source, header, offset)


def _single_data_offset(header):
    # A vox_offset short of the end of the extensions, such as 0, means the
    # voxel data follow the extensions directly
    end_of_extensions = (header.single_vox_offset +
                         header.extensions.get_sizeondisk())
    return max(header.get_vox_offset(), end_of_extensions)


class NiftiObject(object):
    """Header, extensions and volume of one NIfTI-1 image

    Parameters
    ----------
    header : Nifti1Header
        Image header
    extensions : None or sequence of Nifti1Extension, optional
        None means the extensions of `header`
    volume : object with volume read interface
        Voxel data, as described by `header`
    """
    header_class = Nifti1Header

    def __init__(self, header, extensions=None, volume=None):
        self._header = header
        if extensions is None:
            extensions = header.extensions
        self._extensions = header.exts_klass(extensions)
        self._volume = volume

    @property
    def header(self):
        return self._header

    @property
    def extensions(self):
        return self._extensions

    @property
    def volume(self):
        return self._volume

    @property
    def shape(self):
        return self._header.get_data_shape()

    @property
    def affine(self):
        """Best voxel to world affine from the header"""
        return self._header.get_best_affine()

    def into_parts(self):
        """Return ``(header, extensions, volume)``"""
        return self._header, self._extensions, self._volume

    @classmethod
    def from_fileobj(klass, fileobj, volume='inmem', slice_rank=None):
        """Read single file object from open `fileobj`

        Parameters
        ----------
        fileobj : file-like
            Positioned at the start of the header.  Already decompressed.
        volume : {'inmem', 'lazy', 'streamed'}, optional
            Kind of volume to make.  A lazy volume reads from `fileobj` on
            first access, so `fileobj` must stay open and seekable.
        slice_rank : None or int, optional
            Slice rank for a streamed volume

        Raises
        ------
        NoVolumeData
            If the header says the voxel data are in a separate file
        """
        _check_kind(volume)
        header = klass.header_class.from_fileobj(fileobj)
        if not header.is_single_file():
            raise NoVolumeData('header magic is ni1; voxel data are in a '
                               'separate image file')
        vol = _volume_from(fileobj, header, volume,
                           _single_data_offset(header), slice_rank)
        return klass(header, None, vol)

    @classmethod
    def from_file(klass, filename, volume='inmem', slice_rank=None):
        """Read object from `filename`, which may be gzip compressed

        For a detached header (magic ``ni1``), the image file is the first
        that exists of ``<root>.img.gz`` and ``<root>.img``.

        Raises
        ------
        MissingVolumeFile
            If `filename` is a detached header with no image file
        """
        _check_kind(volume)
        opener = Opener(filename)
        try:
            header = klass.header_class.from_fileobj(opener)
        except BaseException:
            opener.close_if_mine()
            raise
        if not header.is_single_file():
            opener.close_if_mine()
            for img_fname in img_filenames_for(filename):
                if os.path.exists(img_fname):
                    logger.debug('found image file %s', img_fname)
                    break
            else:
                raise MissingVolumeFile(
                    f'no image file found for header {filename}')
            return klass._from_header_and_image(
                header, img_fname, volume, slice_rank, header.get_vox_offset())
        return klass._from_header_and_image(
            header, opener, volume, slice_rank, _single_data_offset(header),
            filename)

    @classmethod
    def from_file_pair(klass, hdr_file, img_file, volume='inmem',
                       slice_rank=None):
        """Read object from header file `hdr_file` and image `img_file`

        Either may be a filename, ``.gz`` compressed or not, or an open file
        object.  The voxel data start at ``vox_offset`` of `img_file`.
        """
        _check_kind(volume)
        with Opener(hdr_file) as fileobj:
            header = klass.header_class.from_fileobj(fileobj)
        return klass._from_header_and_image(header, img_file, volume,
                                            slice_rank,
                                            header.get_vox_offset())

    @classmethod
    def _from_header_and_image(klass, header, img_file, volume, slice_rank,
                               offset, lazy_source=None):
        # Opener passes through an existing Opener without taking ownership
        opener = (img_file if isinstance(img_file, Opener)
                  else Opener(img_file))
        if lazy_source is None:
            lazy_source = img_file
        if volume == 'lazy':
            opener.close_if_mine()
            return klass(header, None,
                         _volume_from(None, header, volume, offset,
                                      lazy_source=lazy_source))
        if volume == 'streamed':
            try:
                vol = _volume_from(opener, header, volume, offset, slice_rank)
            except BaseException:
                opener.close_if_mine()
                raise
            return klass(header, None, vol)
        with opener:
            vol = _volume_from(opener, header, volume, offset)
        return klass(header, None, vol)

    def get_data(self, dtype=None):
        """Rescaled voxel data as array; default type is float64"""
        if dtype is None:
            return self._volume.get_data()
        return self._volume.get_data(dtype)

    def to_filename(self, filename):
        """Write object as single file; see :func:`~nifticodec.writer.write_nifti`

        Writes the stored values of the volume unchanged, keeping the header
        scaling.  A streamed volume cannot be written.
        """
        from .writer import write_nifti
        if isinstance(self._volume, StreamedNiftiVolume):
            raise ValueError('cannot write a streamed volume')
        reference = self._header.copy()
        reference.extensions = self._extensions
        write_nifti(filename, self._volume.get_unscaled(), reference,
                    scaled=False)

    def close(self):
        """Close file of a streamed volume, if we opened it"""
        if isinstance(self._volume, StreamedNiftiVolume):
            self._volume.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return (f'{self.__class__.__name__}(shape={self.shape}, '
                f'volume={self._volume!r})')
