#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyjabber.etree import ElementTree

from pyjabber.auth import AuthQuery, make_digest
from pyjabber.auth import NO_RESPONSE, UNSUPPORTED_MECHANISM, AUTH_FAILED
from pyjabber.constants import IQ_AUTH_QNP
from pyjabber.exceptions import AuthenticationError
from pyjabber.iq import Iq
from pyjabber.session import Session

from pyjabber.test._util import _ServerTestCase, make_settings

QUERY1 = """<query xmlns='jabber:iq:auth'>
<username>user</username><password/><digest/><resource/></query>"""

class TestAuthQuery(unittest.TestCase):
    def test_decode(self):
        query = AuthQuery(ElementTree.XML(QUERY1))
        self.assertEqual(query.username, "user")
        self.assertEqual(query.password, "")
        self.assertEqual(query.digest, "")
        self.assertEqual(query.resource, "")

    def test_decode_absent(self):
        query = AuthQuery(ElementTree.XML("<query xmlns='jabber:iq:auth'/>"))
        self.assertIsNone(query.password)
        self.assertIsNone(query.digest)

    def test_payload(self):
        iq = Iq(ElementTree.XML("<iq xmlns='jabber:client' type='result'"
                                        " id='1'>" + QUERY1 + "</iq>"))
        query = iq.get_payload(AuthQuery)
        self.assertIsInstance(query, AuthQuery)
        self.assertEqual(query.username, "user")

    def test_as_xml(self):
        query = AuthQuery(username = "user", resource = "home",
                                                        digest = "abcd")
        xml = query.as_xml()
        self.assertEqual(xml.tag, IQ_AUTH_QNP + "query")
        self.assertEqual([child.tag for child in xml],
                            [IQ_AUTH_QNP + "username", IQ_AUTH_QNP + "digest",
                                IQ_AUTH_QNP + "resource"])
        self.assertEqual(xml.findtext(IQ_AUTH_QNP + "digest"), "abcd")
        self.assertIsNone(xml.find(IQ_AUTH_QNP + "password"))

    def test_digest(self):
        self.assertEqual(make_digest("3EE948B0", "secret"),
                                    "9b825444a6724723ce364240e754cbc51ecca203")
        self.assertEqual(make_digest("stream-1", "secret"),
                                    "b251e397f873ee73099f07fce697d0c35ae4f36b")

class TestLegacyAuth(_ServerTestCase):
    def setUp(self):
        _ServerTestCase.setUp(self)
        self.session = Session("example.com",
                                settings = make_settings(reply_timeout = 0.5))

    def tearDown(self):
        self.session.close()
        _ServerTestCase.tearDown(self)

    def connect(self):
        self.server.start()
        self.session.connect(self.transport)

    def get_auth_request(self):
        requests = self.server.find_received("iq", "set")
        self.assertEqual(len(requests), 1)
        return requests[0].find(IQ_AUTH_QNP + "query")

    def check_failure(self, message):
        with self.assertRaises(AuthenticationError) as context:
            self.session.login("user", "secret", "home")
        self.assertEqual(str(context.exception), message)
        self.assertEqual(context.exception.reason, message)
        self.assertFalse(self.session.is_authenticated())
        self.assertEqual(self.session.authenticator.state, "failed")
        self.assertIs(self.session.authenticator.failure, context.exception)
        # the session stays usable
        self.assertTrue(self.session.is_connected())
        return context.exception

    def test_digest(self):
        self.server.mechanisms = ("digest",)
        self.connect()
        self.session.login("user", "secret", "home")
        self.assertTrue(self.session.is_authenticated())
        self.assertEqual(self.session.user, "user")
        self.assertEqual(self.session.resource, "home")
        query = self.get_auth_request()
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "username"), "user")
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "resource"), "home")
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "digest"),
                                    "b251e397f873ee73099f07fce697d0c35ae4f36b")
        self.assertIsNone(query.find(IQ_AUTH_QNP + "password"))

    def test_discovery_request(self):
        self.connect()
        self.session.login("user", "secret", "home")
        requests = self.server.find_received("iq", "get")
        self.assertEqual(len(requests), 1)
        query = requests[0].find(IQ_AUTH_QNP + "query")
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "username"), "user")
        self.assertEqual([child.tag for child in query],
                                                [IQ_AUTH_QNP + "username"])

    def test_available_presence(self):
        self.connect()
        self.session.login("user", "secret", "home")
        self.assertTrue(self.server.wait_for(
                            lambda: self.server.find_received("presence")))
        presence = self.server.find_received("presence")[0]
        self.assertIsNone(presence.get("type"))

    def test_password(self):
        self.server.mechanisms = ("password",)
        self.connect()
        self.session.login("user", "secret", "home")
        self.assertTrue(self.session.is_authenticated())
        query = self.get_auth_request()
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "password"), "secret")
        self.assertIsNone(query.find(IQ_AUTH_QNP + "digest"))

    def test_digest_without_stream_id(self):
        self.server.stream_id = None
        self.connect()
        self.assertIsNone(self.session.connection_id)
        self.session.login("user", "secret", "home")
        query = self.get_auth_request()
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "password"), "secret")

    def test_default_resource(self):
        self.connect()
        self.session.login("user", "secret")
        self.assertEqual(self.session.resource, "pyjabber")
        query = self.get_auth_request()
        self.assertEqual(query.findtext(IQ_AUTH_QNP + "resource"),
                                                                "pyjabber")

    def test_no_mechanism(self):
        self.server.mechanisms = ()
        self.connect()
        self.check_failure(UNSUPPORTED_MECHANISM)
        self.assertEqual(self.server.find_received("iq", "set"), [])

    def test_no_discovery_response(self):
        self.server.discovery_reply = None
        self.connect()
        self.check_failure(NO_RESPONSE)
        self.assertEqual(len(self.server.find_received("iq", "get")), 1)
        self.assertEqual(self.server.find_received("iq", "set"), [])

    def test_discovery_error(self):
        self.server.discovery_reply = "error"
        self.connect()
        self.check_failure(NO_RESPONSE)
        self.assertEqual(self.server.find_received("iq", "set"), [])

    def test_no_auth_response(self):
        self.server.auth_reply = None
        self.connect()
        self.check_failure(AUTH_FAILED)

    def test_auth_error_legacy(self):
        self.server.auth_reply = "error"
        self.connect()
        error = self.check_failure("Authentication failed -- 401: "
                                                            "Unauthorized")
        self.assertEqual(error.code, "401")
        self.assertEqual(error.text, "Unauthorized")

    def test_auth_error_conflict(self):
        self.server.auth_reply = "error"
        self.server.auth_error = ("<error code='409' type='cancel'>"
                "<conflict xmlns='urn:ietf:params:xml:ns:xmpp-stanzas'/>"
                "</error>")
        self.connect()
        error = self.check_failure("Authentication failed -- 409")
        self.assertEqual(error.code, "409")
        self.assertIsNone(error.text)

    def test_auth_error_no_element(self):
        self.server.auth_reply = "error"
        self.server.auth_error = ""
        self.connect()
        self.check_failure(AUTH_FAILED)

# pylint: disable=W0611
from pyjabber.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
