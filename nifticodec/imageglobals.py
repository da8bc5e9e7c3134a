# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Package-wide settings for header checking and logging

``error_level`` is the problem level (see :mod:`nifticodec.batteryrunners`) at
or above which a header check raises, rather than just logging.  With the
default of 40, a bad magic code (level 45) raises, while a wrong ``sizeof_hdr``
or an odd ``vox_offset`` only appear in the log.

``logger`` is the default logger for check reports.  Its level decides which
reports appear; use ``logger.setLevel(1)`` to see them all.
"""
import logging

error_level = 40
logger = logging.getLogger('nifticodec.global')
logger.addHandler(logging.StreamHandler())


class ErrorLevel(object):
    """Context manager to set the error level temporarily

    >>> from nifticodec import imageglobals
    >>> with ErrorLevel(50):
    ...     imageglobals.error_level
    50
    >>> imageglobals.error_level
    40
    """

    def __init__(self, level):
        self.level = level

    def __enter__(self):
        global error_level
        self._original_level = error_level
        error_level = self.level

    def __exit__(self, exc, value, tb):
        global error_level
        error_level = self._original_level
        return False


class LoggingOutputSuppressor(object):
    """Context manager to stop the global logger printing"""

    def __enter__(self):
        self.orig_handlers = list(logger.handlers)
        for handler in self.orig_handlers:
            logger.removeHandler(handler)

    def __exit__(self, exc, value, tb):
        for handler in self.orig_handlers:
            logger.addHandler(handler)
