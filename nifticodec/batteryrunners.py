# emacs: -*- mode: python-mode; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set ft=python sts=4 ts=4 sw=4 et:
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
#
#   See COPYING file distributed along with the nifticodec package for the
#   copyright and license terms.
#
### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ### ##
"""Checks on header contents, with reports that log or raise

A check is a callable ``func(hdr, fix=False)`` returning ``(hdr, report)``.
The report says how bad the problem is (``problem_level``, 0 for no problem,
up to 50), what it is (``problem_msg``) and, when ``fix`` was True, what was
done about it (``fix_msg``).

Header classes collect their checks in a :class:`BatteryRunner`.  Reading a
header runs the battery without fixes, and each report logs its message and
raises ``report.error`` when the level is at or above the error level.

For example, a check that the voxel offset is not negative:

>>> from nifticodec.batteryrunners import BatteryRunner, Report
>>> def chk_offset(hdr, fix=False):
...     rep = Report(ValueError)
...     if hdr['vox_offset'] >= 0:
...         return hdr, rep
...     rep.problem_level = 30
...     rep.problem_msg = 'vox_offset should not be negative'
...     if fix:
...         hdr['vox_offset'] = 352
...         rep.fix_msg = 'setting to 352'
...     return hdr, rep
>>> btrun = BatteryRunner((chk_offset,))
>>> hdr = {'vox_offset': -1}
>>> [rep.message for rep in btrun.check_only(hdr)]
['vox_offset should not be negative']
>>> hdr, reports = btrun.check_fix(hdr)
>>> hdr['vox_offset'], reports[0].message
(352, 'vox_offset should not be negative; setting to 352')
"""


class BatteryRunner(object):
    """Run a sequence of checks over one object"""

    def __init__(self, checks):
        """Initialize instance from sequence of `checks`

        Parameters
        ----------
        checks : sequence
           callables ``obj, rep = chk(obj, fix=False)``, run in the order
           given.
        """
        self._checks = checks

    def check_only(self, obj):
        """Run checks on `obj`, without fixes, and return the reports"""
        reports = []
        for check in self._checks:
            obj, rep = check(obj, False)
            reports.append(rep)
        return reports

    def check_fix(self, obj):
        """Run checks with fixes; return the fixed `obj` and the reports"""
        reports = []
        for check in self._checks:
            obj, report = check(obj, True)
            reports.append(report)
        return obj, reports

    def __len__(self):
        return len(self._checks)


class Report(object):

    def __init__(self, error=Exception, problem_level=0, problem_msg='',
                 fix_msg=''):
        """Initialize report with values

        Parameters
        ----------
        error : None or Exception
           Error to raise for a serious enough problem.  If None, this check
           never raises.
        problem_level : int
           level of problem, from 0 (no problem) to 50 (severe problem).
           After a fix, the level of the problem remaining.
        problem_msg : string
           String describing problem detected. Default is ''
        fix_msg : string
           String describing any fix applied.  Default is ''.
        """
        self.error = error
        self.problem_level = problem_level
        self.problem_msg = problem_msg
        self.fix_msg = fix_msg

    def __getstate__(self):
        return self.error, self.problem_level, self.problem_msg, self.fix_msg

    def __eq__(self, other):
        return self.__getstate__() == other.__getstate__()

    def __ne__(self, other):
        return not self == other

    def __str__(self):
        return self.__dict__.__str__()

    @property
    def message(self):
        """formatted message string, including fix message if present"""
        if self.fix_msg:
            return '; '.join((self.problem_msg, self.fix_msg))
        return self.problem_msg

    def log_raise(self, logger, error_level=40):
        """Log problem, raise error if problem >= `error_level`

        Parameters
        ----------
        logger : log
           log object, implementing ``log`` method
        error_level : int, optional
           If ``self.problem_level`` >= `error_level`, raise error
        """
        logger.log(self.problem_level, self.message)
        if self.problem_level and self.problem_level >= error_level:
            if self.error:
                raise self.error(self.problem_msg)
