# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Define static nifticodec metadata for nifticodec

The long description parameter is used in the nifticodec top-level docstring.
We exec this file in several places, so it cannot import nifticodec or use
relative imports.
"""

__version__ = '1.0.0'

long_description = """
Read and write access to NIfTI1_ neuroimaging files.

nifticodec reads single file (``.nii``) and header / image pair (``.hdr`` /
``.img``) NIfTI-1 images, gzip compressed or not, in either byte order.  It
gives full access to the header fields and extensions, and to the voxel
data through three kinds of volume: read into memory at once, read on first
access, or streamed slice by slice for volumes too large for memory.  It also
writes arrays as single file images.

.. _NIfTI1: http://nifti.nimh.nih.gov/nifti-1/

License
=======

nifticodec is licensed under the terms of the MIT license.  See the COPYING
file.
"""
