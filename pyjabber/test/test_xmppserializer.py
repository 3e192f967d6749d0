#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyjabber.etree import ElementTree

from pyjabber.xmppserializer import XMPPSerializer, serialize

from pyjabber.test._util import xml_elements_equal

class TestXMPPSerializer(unittest.TestCase):
    def test_emit_head(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("toY", "fromX")
        self.assertTrue(output.startswith("<stream:stream "))
        self.assertTrue("xmlns='jabber:client'" in output
                            or 'xmlns="jabber:client"' in output)
        self.assertFalse("xmlns:xml" in output)
        xml = ElementTree.XML(output + "</stream:stream>")
        self.assertEqual(xml.tag,
                                "{http://etherx.jabber.org/streams}stream")
        self.assertEqual(xml.get('from'), 'fromX')
        self.assertEqual(xml.get('to'), 'toY')
        self.assertEqual(xml.get('version'), '1.0')
        self.assertEqual(len(xml), 0)

    def test_emit_head_no_from_to(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head(None, None)
        xml = ElementTree.XML(output + "</stream:stream>")
        self.assertEqual(xml.get('from'), None)
        self.assertEqual(xml.get('to'), None)

    def test_emit_head_legacy(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("example.com", version = None,
                                                            language = "en")
        xml = ElementTree.XML(output + "</stream:stream>")
        self.assertEqual(xml.get('version'), None)
        self.assertEqual(xml.get('{http://www.w3.org/XML/1998/namespace}lang'),
                                                                        'en')

    def test_emit_tail(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("toY", "fromX")
        output += serializer.emit_tail()
        xml = ElementTree.XML(output)
        self.assertEqual(len(xml), 0)

    def test_emit_stanza_before_head(self):
        serializer = XMPPSerializer("jabber:client")
        stanza = ElementTree.XML("<message xmlns='jabber:client'/>")
        with self.assertRaises(RuntimeError):
            serializer.emit_stanza(stanza)

    def test_emit_stanza(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("to", "from")

        stanza = ElementTree.XML("<message xmlns='jabber:client'>"
                                    "<body>Body</body>"
                                    "<sub xmlns='http://example.org/ns'>"
                                        "<sub1 />"
                                    "<sub2 xmlns='http://example.org/ns2' />"
                                "</sub>"
                            "</message>")
        output += serializer.emit_stanza(stanza)
        output += serializer.emit_tail()
        xml = ElementTree.XML(output)
        self.assertEqual(len(xml), 1)
        self.assertEqual(len(xml[0]), 2)
        self.assertTrue(xml_elements_equal(xml[0], stanza))

        # no prefix for stanza elements
        self.assertTrue("<message><body>" in output)

        # no prefix for stanza child
        self.assertTrue("<sub " in output)

        # ...and its same-namespace child
        self.assertTrue("<sub1/" in output or "<sub1 " in output)

        # prefix for other namespace child
        self.assertTrue("<sub2" in output)

    def test_emit_server_namespace(self):
        serializer = XMPPSerializer("jabber:client")
        serializer.emit_head("to")
        stanza = ElementTree.XML("<presence xmlns='jabber:server'/>")
        output = serializer.emit_stanza(stanza)
        self.assertEqual(output, "<presence/>")

    def test_emit_escaping(self):
        serializer = XMPPSerializer("jabber:client")
        serializer.emit_head("to")
        stanza = ElementTree.Element("{jabber:client}message",
                                                        {"to": "a'b\"c"})
        ElementTree.SubElement(stanza, "{jabber:client}body").text = \
                                                        "<&>\x01 ż"
        output = serializer.emit_stanza(stanza)
        xml = ElementTree.XML(output)
        self.assertEqual(xml.get("to"), "a'b\"c")
        self.assertEqual(xml[0].text, "<&>\ufffd ż")

    def test_emit_foreign_attribute(self):
        serializer = XMPPSerializer("jabber:client")
        serializer.emit_head("to")
        stanza = ElementTree.Element("{jabber:client}message",
                                    {"{http://example.org/ns}attr": "value"})
        output = serializer.emit_stanza(stanza)
        xml = ElementTree.XML(output)
        self.assertEqual(xml.get("{http://example.org/ns}attr"), "value")

    def test_serialize(self):
        stanza = ElementTree.XML("<iq xmlns='jabber:client' type='get'>"
                                    "<query xmlns='jabber:iq:auth'/></iq>")
        output = serialize(stanza)
        self.assertEqual(output, "<iq type=\"get\">"
                                    "<query xmlns=\"jabber:iq:auth\"/></iq>")

# pylint: disable=W0611
from pyjabber.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
