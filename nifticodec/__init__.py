# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##

from .info import __version__
from .info import long_description as __doc__

__doc__ += """
Quickstart
==========

::

   import nifticodec as nc

   obj = nc.load('my_file.nii.gz')
   data = obj.get_data()
   affine = obj.affine

   nc.save(obj, 'my_file_copy.nii')

   with nc.load('big_file.nii', volume='streamed') as big:
       for slice_vol in big.volume:
           print(slice_vol.get_data().mean())
"""

# module imports
from . import errors
from . import nifti1
from . import shape

# object imports
from .arrayproxy import LazyNiftiVolume
from .elements import DataElement, element_for_code, element_for_dtype
from .errors import NiftiError
from .image import NiftiObject
from .loadsave import load, load_pair, save
from .nifti1 import Nifti1Extension, Nifti1Extensions, Nifti1Header
from .shape import Dim, Idx
from .streamed import StreamedNiftiVolume
from .volume import InMemNiftiVolume, SliceView
from .writer import write_nifti
