#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyjabber.etree import ElementTree

from pyjabber.error import StanzaErrorElement

ERROR1 = """<error xmlns='jabber:client' type='cancel' code='409'>
<conflict xmlns='urn:ietf:params:xml:ns:xmpp-stanzas'/>
<text xmlns='urn:ietf:params:xml:ns:xmpp-stanzas'>Resource conflict</text>
<custom xmlns='urn:example'/>
</error>"""

ERROR2 = """<error xmlns='jabber:client' code='401'>Unauthorized</error>"""

ERROR3 = """<error xmlns='jabber:client' code='999'/>"""

ERROR4 = """<error xmlns='urn:example'/>"""

class TestStanzaError(unittest.TestCase):
    def test_decode(self):
        error = StanzaErrorElement(ElementTree.XML(ERROR1))
        self.assertEqual(error.condition_name, "conflict")
        self.assertEqual(error.error_type, "cancel")
        self.assertEqual(error.code, "409")
        self.assertEqual(error.text, "Resource conflict")
        self.assertEqual(error.get_message(), "Resource conflict")
        self.assertEqual(len(error.custom_condition), 1)

    def test_decode_legacy(self):
        error = StanzaErrorElement(ElementTree.XML(ERROR2))
        self.assertEqual(error.condition_name, "not-authorized")
        self.assertEqual(error.error_type, "auth")
        self.assertEqual(error.code, "401")
        self.assertEqual(error.text, "Unauthorized")

    def test_decode_unknown_code(self):
        error = StanzaErrorElement(ElementTree.XML(ERROR3))
        self.assertEqual(error.condition_name, "undefined-condition")
        self.assertEqual(error.code, "999")
        self.assertIsNone(error.text)
        self.assertEqual(error.get_message(), "Unknown error")

    def test_decode_bad_namespace(self):
        with self.assertRaises(ValueError):
            StanzaErrorElement(ElementTree.XML(ERROR4))

    def test_create(self):
        error = StanzaErrorElement("item-not-found", text = "No such item")
        self.assertEqual(error.code, "404")
        self.assertEqual(error.error_type, "cancel")
        xml = error.as_xml()
        self.assertEqual(xml.tag, "{jabber:client}error")
        self.assertEqual(xml.get("code"), "404")
        self.assertEqual(xml.get("type"), "cancel")
        self.assertEqual(xml[0].tag,
                            "{urn:ietf:params:xml:ns:xmpp-stanzas}item-not-found")
        error2 = StanzaErrorElement(xml)
        self.assertEqual(error2.condition_name, "item-not-found")
        self.assertEqual(error2.text, "No such item")

    def test_create_bad_condition(self):
        with self.assertRaises(ValueError):
            StanzaErrorElement("no-such-condition")
        with self.assertRaises(TypeError):
            StanzaErrorElement(404)

    def test_serialize(self):
        error = StanzaErrorElement("bad-request")
        xml = ElementTree.XML(error.serialize())
        self.assertEqual(xml.tag, "error")
        self.assertEqual(xml.get("code"), "400")

# pylint: disable=W0611
from pyjabber.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
