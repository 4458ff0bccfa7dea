# -*- coding: utf-8 -*-
#
# Copyright (C) 2026 The couchdesign developers
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Upload of the files of an ``_attachments`` directory."""

import logging
import mimetypes
import os

__all__ = ['AttachmentEntry', 'AttachmentUploader']
__docformat__ = 'restructuredtext en'

log = logging.getLogger('couchdesign.attachments')


class AttachmentEntry(object):
    """A file to be uploaded as an attachment.

    :param name: the attachment name, the ``/``-separated path of the file
                 relative to the attachments directory
    :param path: the path of the file
    :param content_type: the MIME type, once known
    """

    def __init__(self, name, path, content_type=None):
        self.name = name
        self.path = path
        self.content_type = content_type

    def __repr__(self):
        return '<%s %r (%s)>' % (type(self).__name__, self.name,
                                 self.content_type)


class AttachmentUploader(object):

    def __init__(self, config, database):
        self.config = config
        self.database = database

    def entries(self, root_dir):
        """Yield an `AttachmentEntry` for every file below `root_dir`, at any
        depth, in sorted order.
        """
        for dirpath, dirnames, filenames in os.walk(root_dir):
            dirnames.sort()
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                name = os.path.relpath(path, root_dir).replace(os.sep, '/')
                yield AttachmentEntry(name, path)

    def content_type(self, doc, entry):
        """Guess the MIME type of an attachment from its file name; failing
        that, use the type the server has for the attachment already.

        :return: the MIME type, or `None` if it cannot be determined
        """
        content_type, _ = mimetypes.guess_type(entry.path)
        if content_type is not None:
            return content_type
        resp = self.database.head_attachment(doc, entry.name)
        if resp.status // 100 == 2:
            return resp.headers.get('Content-Type')
        log.debug('HEAD %s: %s %s', entry.name, resp.status, resp.reason)
        return None

    def upload_all(self, root_dir, doc):
        """Upload every file below `root_dir` as an attachment of `doc`.

        Each upload is a write of its own that needs the revision left by the
        previous one, so uploads happen one after the other. Files that cannot
        be uploaded are reported and skipped.

        :param root_dir: the attachments directory
        :param doc: the `DesignDocument`, which must have a revision
        :return: the document, with its latest revision
        :raise ValueError: if the document has no revision
        """
        if doc.rev is None:
            raise ValueError('design document %s is not loaded' % doc.id)

        for entry in self.entries(root_dir):
            entry.content_type = self.content_type(doc, entry)
            if entry.content_type is None:
                log.warning('cannot determine MIME type for %s, ignored',
                            entry.path)
                continue
            with open(entry.path, 'rb') as fileobj:
                resp = self.database.put_attachment_form(
                    doc, entry.name, fileobj, entry.content_type)
            if resp.error is not None:
                log.error('%s: %s: %s', entry.path, *resp.error)
            else:
                log.info('  [attachment] %s', entry.name)
        return doc
