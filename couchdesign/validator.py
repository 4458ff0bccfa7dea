# -*- coding: utf-8 -*-
#
# Copyright (C) 2026 The couchdesign developers
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Syntax checking of JavaScript function files.

A function file holds a single anonymous function expression. It is checked
by running it through a JavaScript shell, wrapped so that it is assigned to
a variable; running it again with a ``print()`` of that variable appended
yields the function source as the interpreter serialises it, which is what
gets stored in the design document.
"""

from collections import namedtuple
from contextlib import contextmanager
import io
import logging
import os
import re
import subprocess
import tempfile

__all__ = ['ScriptValidator', 'ScriptResult', 'Diagnostic']
__docformat__ = 'restructuredtext en'

log = logging.getLogger('couchdesign.validator')


JS_HEADER = ('var _sum = function(keys, values, rereduce) { return 0; }\n'
             'var _count = function(keys, values, rereduce) { return 0; }\n'
             'var _stats = function(keys, values, rereduce) { return 0; }\n'
             'var func = \n')
JS_FOOTER = '\nprint(func)'
HEADER_LINES = JS_HEADER.count('\n')

MESSAGE_LINE = re.compile(r'^([^:]+):([0-9]+):(.*)$')


class Diagnostic(namedtuple('Diagnostic', 'filename lineno message')):
    """A message of the interpreter about a script.

    >>> print(Diagnostic('views/when/map.js', 3, ' SyntaxError: missing ;'))
    views/when/map.js:3: SyntaxError: missing ;
    >>> print(Diagnostic('views/when/map.js', None, 'out of memory'))
    out of memory
    """

    def __str__(self):
        if self.lineno is None:
            return self.message
        return '%s:%d:%s' % (self.filename, self.lineno, self.message)


class ScriptResult(object):
    """Outcome of validating a script: either the function body, or the
    diagnostics explaining why there is none.
    """

    def __init__(self, body=None, diagnostics=None):
        self.body = body
        self.diagnostics = diagnostics or []

    def __repr__(self):
        if self.ok:
            return '<%s ok>' % type(self).__name__
        return '<%s %d diagnostic(s)>' % (type(self).__name__,
                                          len(self.diagnostics))

    @property
    def ok(self):
        return self.body is not None


@contextmanager
def scratch_script(source):
    """Write `source` to a temporary file and yield its path; the file is
    removed when the block exits, however it exits.
    """
    fd, path = tempfile.mkstemp(prefix='couchlint', suffix='.js')
    try:
        with io.open(fd, 'w', encoding='utf-8') as fileobj:
            fileobj.write(source)
        yield path
    finally:
        if os.path.exists(path):
            os.unlink(path)


class ScriptValidator(object):

    def __init__(self, config):
        self.jspath = config.jspath

    def validate(self, path):
        """Check a function file and return its serialised body.

        Diagnostics are logged as they are found, with line numbers that
        refer to the file itself. A script that makes the interpreter fail
        yields no body.

        :param path: the path of the function file
        :rtype: `ScriptResult`
        """
        try:
            with io.open(path, encoding='utf-8') as fileobj:
                source = fileobj.read()
        except (OSError, UnicodeDecodeError) as e:
            return self._failed([Diagnostic(path, None, 'cannot read %s: %s'
                                            % (path, e))])

        with scratch_script(JS_HEADER + source) as script:
            try:
                status, output = self._run(script, merge_stderr=True)
            except OSError as e:
                return self._failed([Diagnostic(path, None, 'cannot run %s: %s'
                                                % (self.jspath, e))])
            diagnostics = self._diagnostics(path, script, output)
            if status != 0:
                if not diagnostics:
                    diagnostics.append(Diagnostic(
                        path, None, '%s: %s exited with status %d'
                        % (path, self.jspath, status)))
                return self._failed(diagnostics)
            for diagnostic in diagnostics:
                log.warning('%s', diagnostic)

            with io.open(script, 'a', encoding='utf-8') as fileobj:
                fileobj.write(JS_FOOTER)
            status, body = self._run(script)
            if status != 0:
                return self._failed([Diagnostic(
                    path, None, '%s: %s exited with status %d while '
                    'printing the function' % (path, self.jspath, status))])

        if body.endswith('\n'):
            body = body[:-1]
        return ScriptResult(body, diagnostics)

    def _failed(self, diagnostics):
        for diagnostic in diagnostics:
            log.error('%s', diagnostic)
        return ScriptResult(diagnostics=diagnostics)

    def _run(self, script, merge_stderr=False):
        proc = subprocess.Popen(
            [self.jspath, script], stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE)
        out, err = proc.communicate()
        if err:
            log.debug('%s: %s', self.jspath,
                      err.decode('utf-8', 'replace').strip())
        return proc.returncode, out.decode('utf-8', 'replace')

    def _diagnostics(self, path, script, output):
        diagnostics = []
        for line in output.splitlines():
            match = MESSAGE_LINE.match(line)
            if match is not None:
                lineno = int(match.group(2))
                if lineno >= HEADER_LINES:
                    lineno -= HEADER_LINES
                diagnostics.append(Diagnostic(path, lineno, match.group(3)))
            elif line.strip():
                diagnostics.append(Diagnostic(
                    path, None, line.replace(script, path)))
        return diagnostics
