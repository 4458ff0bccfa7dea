#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from setuptools import setup


setup(
    name = 'couchdesign',
    version = '0.3',
    description = 'Register CouchDB design documents from directories of '
                  'JavaScript files',
    long_description = \
"""Builds CouchDB design documents from a directory layout of view, show and
top-level function files, checks every script with a JavaScript shell, and
stores the documents and their attachments in a database.""",
    license = 'BSD',
    classifiers = [
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3',
        'Topic :: Database :: Front-Ends',
        'Topic :: Software Development :: Build Tools',
    ],
    packages = ['couchdesign', 'couchdesign.tools', 'couchdesign.tests'],
    python_requires = '>=3.7',
    install_requires = [],
    extras_require = {
        'test': ['pytest'],
    },
    entry_points = {
        'console_scripts': [
            'couchdb-register-design = couchdesign.tools.register:main',
        ],
    },
    zip_safe = False,
)
