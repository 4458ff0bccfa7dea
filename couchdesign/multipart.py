# -*- coding: utf-8 -*-
#
# Copyright (C) 2008-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Support for streamed writing of multipart MIME content, as used for HTML
form uploads.
"""

from uuid import uuid4

__all__ = ['write_multipart']
__docformat__ = 'restructuredtext en'


CRLF = b'\r\n'


class MultipartWriter(object):

    def __init__(self, fileobj, subtype='form-data', boundary=None):
        self.fileobj = fileobj
        if boundary is None:
            boundary = self._make_boundary()
        self.boundary = boundary
        self.content_type = 'multipart/%s; boundary=%s' % (subtype, boundary)

    def add(self, mimetype, content, headers=None):
        self._write_boundary()
        if headers is None:
            headers = {}
        if isinstance(content, str):
            if mimetype and 'charset=' not in mimetype:
                mimetype = mimetype + ';charset=utf-8'
            content = content.encode('utf-8')
        if mimetype:
            headers['Content-Type'] = mimetype
        self._write_headers(headers)
        self.fileobj.write(content)
        self.fileobj.write(CRLF)

    def add_field(self, name, value):
        """Add a plain form field."""
        self.add(None, str(value), {
            'Content-Disposition': 'form-data; name="%s"' % name
        })

    def add_file(self, name, filename, content, mimetype):
        """Add a file upload field."""
        self.add(mimetype, content, {
            'Content-Disposition': 'form-data; name="%s"; filename="%s"' % (
                name, filename.replace('"', '\\"'))
        })

    def close(self):
        self.fileobj.write(b'--')
        self.fileobj.write(self.boundary.encode('ascii'))
        self.fileobj.write(b'--')
        self.fileobj.write(CRLF)

    def _make_boundary(self):
        return '----couchdesign' + uuid4().hex

    def _write_boundary(self):
        self.fileobj.write(b'--')
        self.fileobj.write(self.boundary.encode('ascii'))
        self.fileobj.write(CRLF)

    def _write_headers(self, headers):
        if headers:
            for name in sorted(headers.keys()):
                self.fileobj.write(name.encode('ascii'))
                self.fileobj.write(b': ')
                self.fileobj.write(headers[name].encode('utf-8'))
                self.fileobj.write(CRLF)
        self.fileobj.write(CRLF)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def write_multipart(fileobj, subtype='form-data', boundary=None):
    r"""Simple streaming MIME multipart writer.

    This function returns a `MultipartWriter` object that has a few methods to
    add the parts of a form. For plain fields you call the
    ``add_field(name, value)`` method, for file uploads the
    ``add_file(name, filename, content, mimetype)`` method, and finally the
    ``close()`` method. The ``content_type`` attribute holds the value for
    the ``Content-Type`` header of the request carrying the envelope.

    >>> from io import BytesIO

    >>> buf = BytesIO()
    >>> envelope = write_multipart(buf, boundary='----123456789')
    >>> envelope.content_type
    'multipart/form-data; boundary=----123456789'
    >>> envelope.add_field('_rev', '1-abc')
    >>> envelope.add_file('_attachments', 'css/main.css', b'p {}', 'text/css')
    >>> envelope.close()
    >>> print(buf.getvalue().decode('utf-8').replace('\r\n', '\n'))
    ------123456789
    Content-Disposition: form-data; name="_rev"
    <BLANKLINE>
    1-abc
    ------123456789
    Content-Disposition: form-data; name="_attachments"; filename="css/main.css"
    Content-Type: text/css
    <BLANKLINE>
    p {}
    ------123456789--
    <BLANKLINE>

    Note that an explicit boundary is only specified for testing purposes. If
    the `boundary` parameter is omitted, the multipart writer will generate a
    random string for the boundary.

    :param fileobj: a writable binary file-like object that the output should
                    get written to
    :param subtype: the subtype of the multipart MIME type
    :param boundary: the boundary to use to separate the different parts
    """
    return MultipartWriter(fileobj, subtype=subtype, boundary=boundary)
