# -*- coding: utf-8 -*-
#
# Copyright (C) 2007 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import unittest

from couchdesign.tests import attachments, client, config, design, http, \
        loader, multipart, tools, validator

def suite():
    suite = unittest.TestSuite()
    suite.addTest(http.suite())
    suite.addTest(multipart.suite())
    suite.addTest(design.suite())
    suite.addTest(config.suite())
    suite.addTest(validator.suite())
    suite.addTest(client.suite())
    suite.addTest(attachments.suite())
    suite.addTest(loader.suite())
    suite.addTest(tools.suite())
    return suite

if __name__ == '__main__':
    unittest.main(defaultTest='suite')
