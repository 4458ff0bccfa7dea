#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright (C) 2026 The couchdesign developers
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Register design documents built from directories of JavaScript files.

Use 'couchdb-register-design --help' to get more detailed usage
instructions.
"""

import io
import logging
import optparse
import os
import sys

from couchdesign import __version__ as VERSION
from couchdesign.client import Database
from couchdesign.config import Config, ConfigError, DEFAULT_DATABASE
from couchdesign.http import Session, TransportError
from couchdesign.loader import DesignTree, design_name, load_design_doc

log = logging.getLogger('couchdesign.tools.register')


EPILOG = """\
Register design documents from DIRECTORY where it contains
files for the document.

  DIRECTORY/views/VIEW-NAME/*.js  (e.g. map.js or reduce.js)
  DIRECTORY/shows/*.js            (e.g. print.js or others)
  DIRECTORY/*.js                  (e.g. validate_doc_update.js)
  DIRECTORY/_attachments/*        (automatically uploaded)
"""


class HelpFormatter(optparse.IndentedHelpFormatter):

    def format_epilog(self, epilog):
        if not epilog:
            return ''
        return '\n' + epilog


def register(config, directories, database=None, output=None):
    """Build and store the design document of every directory, one after
    the other.

    :param config: the `Config` of the run
    :param directories: the design directories
    :param database: the `Database` to use, by default the one named by the
                     configuration
    :param output: a directory to write a copy of every document to
    :return: the stored documents
    :raise TransportError: if the server cannot be talked to
    """
    if database is None:
        database = Database(config.database, Session())
    database.ensure_exists()

    tree = DesignTree(config, database)
    docs = []
    for directory in directories:
        log.info('Design: %s', directory)
        doc = database.get_design(design_name(directory))
        doc = tree.load(directory, doc)
        resp = database.save_design(doc)
        if resp.error is not None:
            log.error('%s: %s: %s', doc.id, *resp.error)
        else:
            log.info('  [revision] %s', doc.rev)
        if output is not None:
            write_doc(doc, output)
        docs.append(doc)
    return docs


def write_doc(doc, output):
    filename = os.path.join(output, '%s.json' % doc.name)
    with io.open(filename, 'w', encoding='utf-8') as fileobj:
        doc.write(fileobj)
    log.debug('Wrote %s to %s', doc.id, filename)


def configure_logging(prog, verbose=False, debug=False):
    root = logging.getLogger('couchdesign')
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.propagate = False
    root.setLevel(debug and logging.DEBUG or logging.INFO)

    errors = logging.StreamHandler(sys.stderr)
    errors.setLevel(logging.WARNING)
    errors.setFormatter(logging.Formatter('%s: %%(message)s' % prog))
    root.addHandler(errors)

    if verbose or debug:
        progress = logging.StreamHandler(sys.stdout)
        progress.addFilter(lambda record: record.levelno < logging.WARNING)
        progress.setFormatter(logging.Formatter('%(message)s'))
        root.addHandler(progress)


def main(args=None):
    parser = optparse.OptionParser(
        usage='%prog [OPTION...] DIRECTORY...', epilog=EPILOG,
        formatter=HelpFormatter())
    parser.version = '%%prog version %s' % VERSION
    parser.add_option('-d', '--database', action='store', dest='database',
                      metavar='URL',
                      help='CouchDB endpoint URL (default: "%default")')
    parser.add_option('-j', '--jspath', action='store', dest='jspath',
                      metavar='JS-PATH', help='Javascript interpreter')
    parser.add_option('-e', '--extension', action='store', dest='extension',
                      metavar='EXT',
                      help='file name extension of scripts (default: '
                           '"%default")')
    parser.add_option('-o', '--output', action='store', dest='output',
                      metavar='DIR',
                      help='also write every design document to DIR')
    parser.add_option('-n', '--dry-run', action='store_true', dest='dry_run',
                      help='print the design documents instead of '
                           'registering them')
    parser.add_option('-v', '--verbose', action='store_true', dest='verbose',
                      help='Verbose output')
    parser.add_option('--debug', action='store_true', dest='debug',
                      help='enable debug output')
    parser.add_option('-V', '--version', action='version',
                      help='Show version and exit')
    parser.set_defaults(database=DEFAULT_DATABASE, extension='js',
                        verbose=False, debug=False, dry_run=False)
    options, args = parser.parse_args(args)

    prog = parser.get_prog_name()
    configure_logging(prog, verbose=options.verbose, debug=options.debug)

    config = Config(options.database, jspath=options.jspath,
                    verbose=options.verbose, extension=options.extension)
    try:
        config.check()
    except ConfigError as e:
        log.error('%s', e)
        log.error("Try `--help' for more information.")
        return 1

    if len(args) < 1:
        log.error('wrong number of argument(s)')
        log.error("Try `--help' for more information.")
        return 1

    if options.output is not None and not os.path.isdir(options.output):
        log.error('%s is not a directory', options.output)
        return 1

    if options.dry_run:
        for directory in args:
            doc = load_design_doc(directory, config)
            doc.write(sys.stdout)
        return 0

    try:
        register(config, args, output=options.output)
    except TransportError as e:
        log.error('%s: %s', config.database, e)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
