# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Client for the parts of the CouchDB database API that are needed to
register design documents.

Methods return the `http.Response` of the write they perform; CouchDB errors
are never raised, they are available as ``response.error``.
"""

import logging

from couchdesign import http
from couchdesign.design import DesignDocument

__all__ = ['Database']
__docformat__ = 'restructuredtext en'

log = logging.getLogger('couchdesign.client')


class Database(object):
    """Representation of a database on a CouchDB server.

    :param url: the URL of the database, or a `http.Resource` for it
    :param session: an `http.Session` instance or `None` for a default
                    session
    """

    def __init__(self, url, session=None):
        if isinstance(url, str):
            self.resource = http.Resource(url, session)
        else:
            self.resource = url # treat as a Resource object

    def __repr__(self):
        return '<%s %r>' % (type(self).__name__, self.url)

    @property
    def url(self):
        """The URL of the database, without credentials."""
        return self.resource.url

    def ensure_exists(self):
        """Create the database unless it already exists.

        :raise http.TransportError: if the server cannot be reached
        """
        resp = self.resource.put()
        if resp.error is not None and resp.error[0] != 'file_exists':
            log.debug('Cannot create %s: %s: %s', self.url, *resp.error)
        return resp

    def get_design(self, name):
        """Fetch a design document.

        A design document that cannot be fetched, because it does not exist
        yet or for any other reason reported by the server, is returned as a
        new, empty document.

        :param name: the name of the design document
        :rtype: `DesignDocument`
        """
        doc = DesignDocument(name)
        resp = self.resource('_design', doc.name).get()
        data = resp.json()
        if resp.error is not None or not isinstance(data, dict) \
                or '_id' not in data:
            log.debug('Starting %s from scratch (%s)', doc.id, resp.error)
            return doc
        return DesignDocument.from_json(data)

    def save_design(self, doc):
        """Store a design document using its current revision.

        On success the revision of `doc` is updated.

        :param doc: the `DesignDocument` to store
        :rtype: `http.Response`
        """
        resp = self.resource('_design', doc.name).put(body=doc.to_json())
        if resp.error is None:
            doc.rev = (resp.json() or {}).get('rev', doc.rev)
        return resp

    def head_attachment(self, doc, filename):
        """Ask for the headers of an attachment of a design document.

        :param filename: the attachment name, a ``/``-separated relative path
        :rtype: `http.Response`
        """
        resource = self.resource('_design', doc.name, *filename.split('/'))
        return resource.head()

    def put_attachment_form(self, doc, filename, content, content_type):
        """Upload an attachment the way a browser form would, as a
        ``multipart/form-data`` POST carrying the current revision.

        Note that `doc` is required to have a revision. On success the
        revision of `doc` is updated and a stub for the new attachment is
        recorded, so that storing the document afterwards keeps it.

        :param filename: the attachment name, a ``/``-separated relative path
        :param content: a byte string or a readable binary file-like object
        :param content_type: the MIME type of the attachment
        :rtype: `http.Response`
        """
        resource = self.resource('_design', doc.name)
        resp = resource.post_form(
            fields=[('_rev', doc.rev)],
            files=[('_attachments', filename, content, content_type)],
            headers={'Referer': self.url})
        if resp.error is None:
            doc.rev = (resp.json() or {}).get('rev', doc.rev)
            doc.attachments[filename] = {'stub': True,
                                         'content_type': content_type}
        return resp
