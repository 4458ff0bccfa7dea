# -*- coding: utf-8 -*-
#
# Copyright (C) 2007 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

try:
    from importlib.metadata import version as _dist_version
    __version__ = _dist_version('couchdesign')
except Exception:
    __version__ = '?'

from couchdesign.client import Database
from couchdesign.design import DesignDocument
from couchdesign.http import Resource, Response, Session, TransportError
