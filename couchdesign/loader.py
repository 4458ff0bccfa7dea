# -*- coding: utf-8 -*-
"""
Load design documents from the filesystem.

Description
-----------

A design directory is laid out by convention; the name of every script file
(without its extension) is the name of the function slot it fills::

  like
    ├── _attachments
    │   ├── index.html
    │   └── css
    │       └── style.css
    ├── shows
    │   └── print.js
    ├── validate_doc_update.js
    └── views
        ├── when
        │   ├── map.js
        │   └── reduce.js
        └── who
            └── map.js

Becomes the design document ``_design/like``::

    {
      "_id": "_design/like",
      "language": "javascript",
      "shows": {
        "print": "function(doc, req) { ... }"
      },
      "validate_doc_update": "function(newDoc, oldDoc, userCtx) { ... }",
      "views": {
        "when": {
          "map": "function(doc) { ... }",
          "reduce": "function(keys, values, rereduce) { ... }"
        },
        "who": {
          "map": "function(doc) { ... }"
        }
      }
    }

Every script is checked with the JavaScript interpreter first; scripts that
fail are left out. The files under ``_attachments`` are uploaded as
attachments of the document, under their path relative to that directory.

Directory entries are visited in sorted order.
"""

import logging
import os.path

from couchdesign.attachments import AttachmentUploader
from couchdesign.design import DesignDocument, RESERVED_SLOTS
from couchdesign.validator import ScriptValidator

__all__ = ['DesignTree', 'design_name', 'load_design_doc']

log = logging.getLogger('couchdesign.loader')


def design_name(directory):
    """Return the name of the design document built from `directory`.

    >>> design_name('designs/like/')
    'like'
    """
    return os.path.basename(os.path.normpath(directory))


class DesignTree(object):
    """Folds the scripts of a design directory into a `DesignDocument`.

    :param config: the `Config` of the run
    :param database: the `client.Database` attachments are uploaded to, or
                     `None` to leave attachments alone
    """

    def __init__(self, config, database=None, validator=None):
        self.config = config
        self.database = database
        if validator is None:
            validator = ScriptValidator(config)
        self.validator = validator
        self.uploader = None
        if database is not None:
            self.uploader = AttachmentUploader(config, database)

    def load(self, directory, doc):
        """Merge the scripts found in `directory` into `doc`, then upload
        its attachments.

        :return: the document, with the revision left by the last upload
        :rtype: `DesignDocument`
        """
        self.load_shows(os.path.join(directory, 'shows'), doc)
        self.load_views(os.path.join(directory, 'views'), doc)
        self.load_functions(directory, doc)

        # This must be the last step
        attachments = os.path.join(directory, '_attachments')
        if self.uploader is not None and os.path.isdir(attachments):
            if doc.rev is None and not self._create(doc):
                return doc
            doc = self.uploader.upload_all(attachments, doc)
        return doc

    def load_shows(self, shows_dir, doc):
        for name, path in self.scripts(shows_dir):
            body = self._validate(path)
            if body is not None:
                doc.add_show(name, body)
                log.info('  [show] %s', os.path.basename(path))

    def load_views(self, views_dir, doc):
        if not os.path.isdir(views_dir):
            return
        for view in sorted(os.listdir(views_dir)):
            view_dir = os.path.join(views_dir, view)
            if not os.path.isdir(view_dir):
                continue
            for name, path in self.scripts(view_dir):
                body = self._validate(path)
                if body is not None:
                    doc.add_view_function(view, name, body)
                    log.info('  [view] %s', os.path.basename(path))

    def load_functions(self, directory, doc):
        for name, path in self.scripts(directory):
            if name in RESERVED_SLOTS:
                log.warning('%s: %r is a reserved name, ignored', path, name)
                continue
            body = self._validate(path)
            if body is not None:
                doc.add_function(name, body)
                log.info('  [%s] %s', name, os.path.basename(path))

    def scripts(self, directory):
        """Yield ``(slot name, path)`` for the script files directly inside
        `directory`, in sorted order.
        """
        if not os.path.isdir(directory):
            return
        suffix = '.' + self.config.extension
        for filename in sorted(os.listdir(directory)):
            path = os.path.join(directory, filename)
            if not filename.endswith(suffix) or not os.path.isfile(path):
                continue
            name = filename[:-len(suffix)]
            if name:
                yield name, path

    def _validate(self, path):
        result = self.validator.validate(path)
        if not result.ok:
            log.warning('%s: skipped', path)
            return None
        return result.body

    def _create(self, doc):
        # Attachments can only be added to a document that has a revision
        resp = self.database.save_design(doc)
        if resp.error is not None:
            log.error('%s: %s: %s', doc.id, *resp.error)
            log.error('%s: attachments not uploaded', doc.id)
            return False
        log.debug('Created %s at %s', doc.id, doc.rev)
        return True


def load_design_doc(directory, config, doc=None):
    """Build the design document for `directory` without talking to a
    server; attachments are ignored.

    :param config: the `Config` of the run
    :param doc: the `DesignDocument` to merge into, by default a new one
    :rtype: `DesignDocument`
    """
    if doc is None:
        doc = DesignDocument(design_name(directory))
    return DesignTree(config).load(directory, doc)
