# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Tests for imageglobals module"""
import logging
from io import StringIO

from .. import imageglobals as igs


def test_errorlevel():
    orig_level = igs.error_level
    for level in (10, 20, 30):
        with igs.ErrorLevel(level):
            assert igs.error_level == level
        assert igs.error_level == orig_level


def test_logging_output_suppressor():
    str_io = StringIO()
    handler = logging.StreamHandler(str_io)
    igs.logger.addHandler(handler)
    try:
        with igs.LoggingOutputSuppressor():
            assert handler not in igs.logger.handlers
            igs.logger.error('hidden')
        assert handler in igs.logger.handlers
        igs.logger.error('shown')
    finally:
        igs.logger.removeHandler(handler)
    assert str_io.getvalue() == 'shown\n'
