# -*- coding: utf-8 -*-
#
# Copyright (C) 2008 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""In-memory representation of design documents."""

from copy import deepcopy
import json

__all__ = ['DesignDocument', 'RESERVED_SLOTS']
__docformat__ = 'restructuredtext en'


#: Top-level names that belong to the document itself, not to a function.
RESERVED_SLOTS = frozenset([
    '_id', '_rev', '_attachments', 'language', 'views', 'shows'
])


class DesignDocument(object):
    """A design document, made of top-level functions, show functions and
    views, plus whatever other fields were found on the server.

    >>> doc = DesignDocument('like')
    >>> doc.id
    '_design/like'
    >>> doc.add_view_function('when', 'map', 'function(doc) { emit(doc.when); }')
    >>> doc.add_show('print', 'function(doc, req) { return doc.text; }')
    >>> data = doc.to_json()
    >>> sorted(data)
    ['_id', 'language', 'shows', 'views']
    >>> data['views']
    {'when': {'map': 'function(doc) { emit(doc.when); }'}}

    A name that already carries the ``_design/`` prefix is accepted as well:

    >>> DesignDocument('_design/like').name
    'like'
    """

    def __init__(self, name, rev=None, language='javascript'):
        """Initialize the design document.

        :param name: the name of the design document, with or without the
                     ``_design/`` prefix
        :param rev: the current revision, or `None` for a new document
        :param language: the language the functions are written in
        """
        if name.startswith('_design/'):
            name = name[8:]
        self._id = '_design/%s' % name
        self.rev = rev
        self.language = language
        self.functions = {}
        self.shows = {}
        self.views = {}
        self.attachments = {}
        self.extra = {}

    def __repr__(self):
        return '<%s %r@%r>' % (type(self).__name__, self.id, self.rev)

    def __eq__(self, other):
        if not isinstance(other, DesignDocument):
            return NotImplemented
        return self.to_json() == other.to_json()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    @property
    def id(self):
        """The document ID.

        :rtype: str
        """
        return self._id

    @property
    def name(self):
        """The design document name, without the ``_design/`` prefix."""
        return self._id[8:]

    def add_function(self, name, body):
        """Set a top-level function slot, such as ``validate_doc_update``.

        :raise ValueError: if the name collides with document metadata
        """
        if name in RESERVED_SLOTS:
            raise ValueError('%r is a reserved name in a design document'
                             % name)
        self.functions[name] = body

    def add_show(self, name, body):
        self.shows[name] = body

    def add_view_function(self, view, name, body):
        """Set one function (``map``, ``reduce``...) of a view."""
        self.views.setdefault(view, {})[name] = body

    def to_json(self):
        """Return the document as the mapping that is sent to the server."""
        data = deepcopy(self.extra)
        data.update(self.functions)
        data['_id'] = self._id
        if self.rev is not None:
            data['_rev'] = self.rev
        if self.language is not None:
            data['language'] = self.language
        if self.views:
            data['views'] = deepcopy(self.views)
        if self.shows:
            data['shows'] = dict(self.shows)
        if self.attachments:
            data['_attachments'] = deepcopy(self.attachments)
        return data

    @classmethod
    def from_json(cls, data):
        """Build a design document from the mapping returned by the server.

        String values at the top level become functions; any other field that
        is not document metadata is kept as is.
        """
        doc = cls(data['_id'], rev=data.get('_rev'),
                  language=data.get('language'))
        for name, value in data.items():
            if name in RESERVED_SLOTS:
                continue
            if isinstance(value, str) and not name.startswith('_'):
                doc.functions[name] = value
            else:
                doc.extra[name] = deepcopy(value)
        for view, funcs in (data.get('views') or {}).items():
            if not isinstance(funcs, dict):
                doc.views[view] = funcs
                continue
            for name, body in funcs.items():
                doc.add_view_function(view, name, body)
        doc.shows.update(data.get('shows') or {})
        doc.attachments.update(deepcopy(data.get('_attachments') or {}))
        return doc

    def write(self, fileobj):
        """Write the JSON form of the document to a text file object."""
        json.dump(self.to_json(), fileobj, indent=2, sort_keys=True)
        fileobj.write('\n')
