# -*- coding: utf-8 -*-
#
# Copyright (C) 2026 The couchdesign developers
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from email import policy
from email.parser import BytesParser
from http.server import BaseHTTPRequestHandler, HTTPServer
import io
import json
import os
import shutil
import socket
import stat
import sys
import tempfile
import threading
from urllib.parse import unquote, urlsplit
from uuid import uuid4

from couchdesign.client import Database
from couchdesign.config import Config
from couchdesign.http import Session


FAKE_JS = '''\
import os
import signal
import sys

HEADER_END = 'var func = \\n'
FOOTER = '\\nprint(func)'

path = sys.argv[1]
with open(path) as fileobj:
    source = fileobj.read()
for lineno, line in enumerate(source.split('\\n'), 1):
    if 'SYNTAX_ERROR' in line:
        sys.stderr.write('%s:%d: SyntaxError: missing ; before statement\\n'
                         % (path, lineno))
        sys.exit(3)
    if 'CRASH' in line:
        os.kill(os.getpid(), signal.SIGKILL)
    if 'WARNING' in line:
        sys.stderr.write('%s:%d: warning: test warning\\n' % (path, lineno))
body = source.split(HEADER_END, 1)[1]
if body.endswith(FOOTER):
    sys.stdout.write(body[:-len(FOOTER)].strip() + '\\n')
'''


def make_fake_js(directory):
    """Write an executable stand-in for a JavaScript shell into `directory`
    and return its path.

    It rejects lines containing ``SYNTAX_ERROR``, kills itself on ``CRASH``,
    warns about lines containing ``WARNING``, and prints the wrapped function
    when the script ends with ``print(func)``.
    """
    path = os.path.join(directory, 'fakejs')
    with io.open(path, 'w', encoding='utf-8') as fileobj:
        fileobj.write('#!%s\n' % sys.executable)
        fileobj.write(FAKE_JS)
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP |
             stat.S_IXOTH)
    return path


def write_files(root, files):
    """Create the files of a mapping from relative path to content below
    `root`.
    """
    for name, content in files.items():
        path = os.path.join(root, *name.split('/'))
        if not os.path.isdir(os.path.dirname(path)):
            os.makedirs(os.path.dirname(path))
        mode = isinstance(content, bytes) and 'wb' or 'w'
        with open(path, mode) as fileobj:
            fileobj.write(content)


def unused_port():
    sock = socket.socket()
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


class FakeCouch(object):
    """Just enough of a CouchDB server, running in a thread, to register
    design documents: database creation, document GET and PUT, attachment
    HEAD and form uploads.
    """

    def __init__(self):
        self.databases = {}
        self.requests = []
        self.uploads = []
        self.server = HTTPServer(('127.0.0.1', 0), FakeCouchHandler)
        self.server.couch = self
        self.thread = threading.Thread(target=self.server.serve_forever)
        self.thread.daemon = True

    @property
    def url(self):
        return 'http://127.0.0.1:%d' % self.server.server_address[1]

    def start(self):
        self.thread.start()

    def stop(self):
        self.server.shutdown()
        self.server.server_close()
        self.thread.join()

    def new_rev(self, rev=None):
        num = rev and int(rev.split('-', 1)[0]) or 0
        return '%d-%s' % (num + 1, uuid4().hex)

    def store(self, dbname, docid, doc):
        """Put a document in place without going through HTTP."""
        db = self.databases.setdefault(dbname, {})
        doc = dict(doc, _id=docid, _rev=self.new_rev())
        db[docid] = {'doc': doc, 'attachments': {}}
        return doc['_rev']

    def doc(self, dbname, docid):
        entry = self.databases[dbname][docid]
        return self.export(entry)

    def export(self, entry):
        doc = dict(entry['doc'])
        if entry['attachments']:
            doc['_attachments'] = dict(
                (name, {'content_type': ctype, 'length': len(data),
                        'stub': True})
                for name, (ctype, data) in entry['attachments'].items())
        return doc


class FakeCouchHandler(BaseHTTPRequestHandler):

    def log_message(self, format, *args):
        pass

    @property
    def couch(self):
        return self.server.couch

    def _split_path(self):
        path = urlsplit(self.path).path
        return [unquote(part) for part in path.split('/')[1:] if part]

    def _read_body(self):
        length = int(self.headers.get('Content-Length') or 0)
        return length and self.rfile.read(length) or b''

    def _send(self, status, data=None, headers=None):
        body = b''
        if data is not None:
            body = json.dumps(data).encode('utf-8')
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(body)

    def _not_found(self, reason='missing'):
        self._send(404, {'error': 'not_found', 'reason': reason})

    def _conflict(self):
        self._send(409, {'error': 'conflict',
                         'reason': 'Document update conflict.'})

    def _entry(self, parts):
        db = self.couch.databases.get(parts[0])
        if db is None:
            return None, None
        docid = '/'.join(parts[1:3])
        return db, db.get(docid)

    def do_PUT(self):
        parts = self._split_path()
        body = self._read_body()
        self.couch.requests.append(('PUT', self.path))
        if len(parts) == 1:
            if parts[0] in self.couch.databases:
                self._send(412, {'error': 'file_exists',
                                 'reason': 'The database could not be '
                                           'created, the file already '
                                           'exists.'})
            else:
                self.couch.databases[parts[0]] = {}
                self._send(201, {'ok': True})
            return

        db, entry = self._entry(parts)
        if db is None:
            return self._not_found('no_db_file')
        doc = json.loads(body.decode('utf-8'))
        current = entry and entry['doc']['_rev'] or None
        if doc.get('_rev') != current:
            return self._conflict()
        docid = '/'.join(parts[1:3])
        stubs = doc.pop('_attachments', {})
        attachments = entry and entry['attachments'] or {}
        attachments = dict((name, value) for name, value
                           in attachments.items() if name in stubs)
        doc['_id'] = docid
        doc['_rev'] = self.couch.new_rev(current)
        db[docid] = {'doc': doc, 'attachments': attachments}
        self._send(201, {'ok': True, 'id': docid, 'rev': doc['_rev']})

    def do_GET(self):
        parts = self._split_path()
        self.couch.requests.append(('GET', self.path))
        db, entry = self._entry(parts)
        if db is None:
            return self._not_found('no_db_file')
        if entry is None:
            return self._not_found()
        self._send(200, self.couch.export(entry))

    def do_HEAD(self):
        parts = self._split_path()
        self.couch.requests.append(('HEAD', self.path))
        db, entry = self._entry(parts)
        name = '/'.join(parts[3:])
        if entry is None or name not in entry['attachments']:
            return self._not_found()
        ctype, data = entry['attachments'][name]
        self.send_response(200)
        self.send_header('Content-Type', ctype)
        self.send_header('Content-Length', str(len(data)))
        self.end_headers()

    def do_POST(self):
        parts = self._split_path()
        body = self._read_body()
        self.couch.requests.append(('POST', self.path))
        db, entry = self._entry(parts)
        if entry is None:
            return self._not_found()

        envelope = b'Content-Type: ' + \
                self.headers['Content-Type'].encode('ascii') + b'\r\n\r\n'
        message = BytesParser(policy=policy.HTTP).parsebytes(envelope + body)
        rev, upload = None, None
        for part in message.iter_parts():
            name = part.get_param('name', header='content-disposition')
            if name == '_rev':
                rev = part.get_payload(decode=True).decode('utf-8')
            elif name == '_attachments':
                upload = (part.get_filename(), part.get_content_type(),
                          part.get_payload(decode=True))
        self.couch.uploads.append({'rev': rev, 'upload': upload,
                                   'referer': self.headers.get('Referer')})
        if rev != entry['doc']['_rev']:
            return self._conflict()
        filename, ctype, data = upload
        entry['attachments'][filename] = (ctype, data)
        entry['doc']['_rev'] = self.couch.new_rev(rev)
        self._send(201, {'ok': True, 'id': entry['doc']['_id'],
                         'rev': entry['doc']['_rev']})


class FakeCouchMixin(object):
    """Runs a `FakeCouch` and provides a scratch directory, a fake
    interpreter and a `Config` pointing at both.
    """

    dbname = 'designs'

    def setUp(self):
        super(FakeCouchMixin, self).setUp()
        self.couch = FakeCouch()
        self.couch.start()
        self.tempdir = tempfile.mkdtemp(prefix='couchdesign-test')
        bindir = os.path.join(self.tempdir, 'bin')
        os.mkdir(bindir)
        self.jspath = make_fake_js(bindir)
        self.dburl = '%s/%s' % (self.couch.url, self.dbname)
        self.config = Config(self.dburl, jspath=self.jspath)
        self.db = Database(self.dburl, Session())

    def tearDown(self):
        self.couch.stop()
        shutil.rmtree(self.tempdir)
        super(FakeCouchMixin, self).tearDown()

    def design_dir(self, name, files):
        directory = os.path.join(self.tempdir, name)
        os.mkdir(directory)
        write_files(directory, files)
        return directory


class ScratchDirMixin(object):
    """Provides a scratch directory and a fake interpreter, no server."""

    def setUp(self):
        super(ScratchDirMixin, self).setUp()
        self.tempdir = tempfile.mkdtemp(prefix='couchdesign-test')
        bindir = os.path.join(self.tempdir, 'bin')
        os.mkdir(bindir)
        self.jspath = make_fake_js(bindir)
        self.config = Config('http://localhost:5984/designs',
                             jspath=self.jspath)

    def tearDown(self):
        shutil.rmtree(self.tempdir)
        super(ScratchDirMixin, self).tearDown()

    def design_dir(self, name, files):
        directory = os.path.join(self.tempdir, name)
        os.mkdir(directory)
        write_files(directory, files)
        return directory
