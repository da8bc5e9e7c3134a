#!/usr/bin/env python
# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""
Setuptools entrypoint

This file should not be run directly. To install, use:

    pip install .

To install with the test requirements, use:

    pip install '.[test]'

"""
import os

from setuptools import find_packages, setup

# Get version and release info, which is all stored in nifticodec/info.py
info = {}
with open(os.path.join('nifticodec', 'info.py'), 'rt') as fobj:
    exec(fobj.read(), info)

setup(
    name='nifticodec',
    version=info['__version__'],
    description='Read and write access to NIfTI-1 image files',
    long_description=info['long_description'],
    license='MIT License',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering',
    ],
    packages=find_packages(include=['nifticodec', 'nifticodec.*']),
    python_requires='>=3.9',
    install_requires=['numpy>=1.22'],
    extras_require={'test': ['pytest']},
)
