# -*- coding: utf-8 -*-
#
# Copyright (C) 2008 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

import doctest
from email import policy
from email.parser import BytesParser
from io import BytesIO
import unittest

from couchdesign import multipart


class WriteMultipartTestCase(unittest.TestCase):

    def _parse(self, envelope, data):
        head = ('Content-Type: %s\r\n\r\n' % envelope.content_type)
        return BytesParser(policy=policy.HTTP).parsebytes(
            head.encode('ascii') + data)

    def test_form_upload(self):
        buf = BytesIO()
        envelope = multipart.write_multipart(buf)
        envelope.add_field('_rev', '3-d2c4')
        content = b'\x89PNG\r\n\x1a\n\x00\x00--not a boundary\r\n'
        envelope.add_file('_attachments', 'img/logo.png', content,
                          'image/png')
        envelope.close()

        parts = list(self._parse(envelope, buf.getvalue()).iter_parts())
        self.assertEqual(len(parts), 2)
        self.assertEqual(
            parts[0].get_param('name', header='content-disposition'), '_rev')
        self.assertEqual(parts[0].get_payload(decode=True), b'3-d2c4')
        self.assertEqual(parts[1].get_filename(), 'img/logo.png')
        self.assertEqual(parts[1].get_content_type(), 'image/png')
        self.assertEqual(parts[1].get_payload(decode=True), content)

    def test_empty_file(self):
        buf = BytesIO()
        with multipart.write_multipart(buf) as envelope:
            envelope.add_field('_rev', '1-a')
            envelope.add_file('_attachments', 'empty.txt', b'', 'text/plain')
        parts = list(self._parse(envelope, buf.getvalue()).iter_parts())
        self.assertEqual(parts[1].get_payload(decode=True), b'')

    def test_unicode_text_gets_charset(self):
        buf = BytesIO()
        envelope = multipart.write_multipart(buf, boundary='----b')
        envelope.add('text/plain', u'caf\xe9')
        envelope.close()
        self.assertTrue(b'Content-Type: text/plain;charset=utf-8\r\n'
                        in buf.getvalue())
        self.assertTrue(u'caf\xe9'.encode('utf-8') in buf.getvalue())

    def test_generated_boundaries_differ(self):
        first = multipart.write_multipart(BytesIO())
        second = multipart.write_multipart(BytesIO())
        self.assertNotEqual(first.boundary, second.boundary)


def suite():
    suite = unittest.TestSuite()
    suite.addTest(doctest.DocTestSuite(multipart))
    suite.addTest(unittest.TestLoader().loadTestsFromTestCase(
        WriteMultipartTestCase))
    return suite


if __name__ == '__main__':
    unittest.main(defaultTest='suite')
