# -*- coding: utf-8 -*-
#
# Copyright (C) 2026 The couchdesign developers
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Settings shared by the components that build and register design
documents.
"""

import os
import shutil

__all__ = ['Config', 'ConfigError', 'DEFAULT_DATABASE', 'locate_interpreter']
__docformat__ = 'restructuredtext en'


DEFAULT_DATABASE = os.environ.get('COUCHDB_URL', 'http://localhost:5984/sedis')

#: JavaScript shells that can run a script file and have a ``print()``.
INTERPRETERS = ('js', 'v8', 'd8')


class ConfigError(Exception):
    """Exception raised when the settings cannot possibly work."""


def locate_interpreter(names=INTERPRETERS):
    """Return the path of the first of the given programs found in ``PATH``,
    or `None`.
    """
    for name in names:
        path = shutil.which(name)
        if path is not None:
            return path
    return None


class Config(object):
    """The settings of one run.

    >>> config = Config('http://localhost:5984/app/', jspath='/usr/bin/js')
    >>> config.database
    'http://localhost:5984/app'
    >>> config.extension
    'js'
    """

    def __init__(self, database=DEFAULT_DATABASE, jspath=None, verbose=False,
                 extension='js'):
        """Initialize the settings.

        :param database: the URL of the target database
        :param jspath: the JavaScript interpreter, looked up in ``PATH`` when
                       omitted
        :param verbose: whether progress is reported
        :param extension: the file name extension of script files
        """
        self.database = database.rstrip('/')
        if jspath is None:
            jspath = locate_interpreter()
        self.jspath = jspath
        self.verbose = verbose
        self.extension = extension.lstrip('.')

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.database)

    def check(self):
        """Make sure the interpreter can be run.

        :raise ConfigError: if it cannot
        """
        if not self.jspath:
            raise ConfigError('cannot find a JavaScript interpreter '
                              '(tried %s)' % ', '.join(INTERPRETERS))
        if not os.path.isfile(self.jspath) or \
                not os.access(self.jspath, os.X_OK):
            raise ConfigError('%s is not an executable' % self.jspath)
