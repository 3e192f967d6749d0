#!/usr/bin/python

"""Utilities for pyjabber unit tests."""

import socket
import threading
import logging
import unittest
from collections import deque
from xml.sax.saxutils import quoteattr

from pyjabber.constants import IQ_AUTH_QNP, STANZA_CLIENT_QNP
from pyjabber.exceptions import StreamParseError, JabberIOError
from pyjabber.settings import XMPPSettings
from pyjabber.transport import Transport, SocketTransport
from pyjabber.xmppparser import StreamReader, XMLStreamHandler

logger = logging.getLogger("pyjabber.test._util")

TIMEOUT = 5.0 # seconds

TEST_NS = "http://pyjabber.example.net/test/ns"

SERVER_HEAD = ("<?xml version='1.0'?>"
                "<stream:stream xmlns='jabber:client'"
                " xmlns:stream='http://etherx.jabber.org/streams'"
                " from='example.com'{0}>")

def xml_elements_equal(element1, element2, ignore_level1_cdata = False):
    """Check if two XML elements are equal.

    :Parameters:
        - `element1`: the first element to compare
        - `element2`: the other element to compare
        - `ignore_level1_cdata`: if direct text children of the elements
          should be ignored for the comparision
    :Types:
        - `element1`: :etree:`ElementTree.Element`
        - `element2`: :etree:`ElementTree.Element`
        - `ignore_level1_cdata`: `bool`

    :Returntype: `bool`
    """
    if element1.tag != element2.tag:
        return False
    if not ignore_level1_cdata:
        if (element1.text or "").strip() != (element2.text or "").strip():
            return False
    if sorted(element1.items()) != sorted(element2.items()):
        return False
    if len(element1) != len(element2):
        return False
    for child1, child2 in zip(element1, element2):
        if not xml_elements_equal(child1, child2):
            return False
    return True

def make_settings(**kwargs):
    """Settings with short timeouts, for the tests."""
    settings = XMPPSettings({
                    "reply_timeout": 2.0,
                    "startup_timeout": TIMEOUT,
                    "shutdown_timeout": 1.0,
                    "close_grace": 0.05,
                    })
    for key, value in kwargs.items():
        settings[key] = value
    return settings

class RecordingTransport(Transport):
    """In-memory transport.

    Data written is recorded in `written`, `read` returns the chunks queued
    with `feed` and end of input after `close`.
    """
    def __init__(self):
        self.written = []
        self._input = deque()
        self._cond = threading.Condition()
        self.closed = False

    def feed(self, data):
        """Queue data to be returned by `read`."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._cond:
            self._input.append(data)
            self._cond.notify_all()

    def read(self, size):
        with self._cond:
            self._cond.wait_for(lambda: self._input or self.closed)
            if self._input:
                data = self._input.popleft()
                if len(data) > size:
                    self._input.appendleft(data[size:])
                    data = data[:size]
                return data
            return b""

    def write(self, data):
        with self._cond:
            if self.closed:
                raise JabberIOError("Connection closed")
            self.written.append(data)

    def close(self):
        with self._cond:
            self.closed = True
            self._cond.notify_all()

    def get_output(self):
        """Return all data written, decoded."""
        with self._cond:
            return b"".join(self.written).decode("utf-8")

class FakeServer(XMLStreamHandler):
    """Minimal Jabber server for a single connection, running in its own
    thread.

    It answers the stream head, the legacy authentication requests and
    "get" requests with a `TEST_NS` payload (with an empty result).

    :Ivariables:
        - `sock`: the server end of the connection
        - `stream_id`: the id sent in the stream head (`None` for none)
        - `send_head`: if the stream head should be sent at all
        - `mechanisms`: credentials advertised in the authentication
          discovery reply
        - `discovery_reply`: "result", "error" or `None` (no reply)
        - `auth_reply`: "result", "error" or `None` (no reply)
        - `auth_error`: the <error/> element sent on "error" `auth_reply`
        - `received`: stanza elements received
        - `stream_head`: the client stream head element
        - `stream_ended`: `True` when the client closed its stream
        - `eof`: `True` when the connection was closed by the client
    """
    # pylint: disable=R0902
    def __init__(self, sock, stream_id = "stream-1"):
        XMLStreamHandler.__init__(self)
        self.sock = sock
        self.stream_id = stream_id
        self.send_head = True
        self.mechanisms = ("digest", "password")
        self.discovery_reply = "result"
        self.auth_reply = "result"
        self.auth_error = "<error code='401'>Unauthorized</error>"
        self.received = []
        self.stream_head = None
        self.stream_ended = False
        self.eof = False
        self.lock = threading.RLock()
        self.cond = threading.Condition(self.lock)
        self._parser = StreamReader(self)
        self._thread = None

    def start(self):
        """Start the server thread."""
        self._thread = threading.Thread(target = self.run,
                                                        name = "FakeServer")
        self._thread.daemon = True
        self._thread.start()

    def run(self):
        """The server thread main loop."""
        while True:
            try:
                data = self.sock.recv(4096)
            except OSError:
                break
            logger.debug("srv IN: {0!r}".format(data))
            try:
                self._parser.feed(data)
            except StreamParseError as err:
                logger.debug("srv parse error: {0}".format(err))
                break
            if not data:
                break
        with self.cond:
            self.eof = True
            self.cond.notify_all()

    def send(self, data):
        """Send data to the client."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        logger.debug("srv OUT: {0!r}".format(data))
        try:
            self.sock.sendall(data)
        except OSError as err:
            logger.debug("srv write error: {0}".format(err))

    def close(self):
        """Close the server end of the connection."""
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()
        if self._thread is not None:
            self._thread.join(TIMEOUT)

    def wait_for(self, predicate, timeout = TIMEOUT):
        """Wait until `predicate` (called with the lock held) returns true.

        :Returntype: `bool`"""
        with self.cond:
            return self.cond.wait_for(predicate, timeout)

    def find_received(self, name, stanza_type = None):
        """Return the received stanza elements with given name and type."""
        with self.lock:
            return [element for element in self.received
                        if element.tag == STANZA_CLIENT_QNP + name
                            and (stanza_type is None
                                    or element.get("type") == stanza_type)]

    def stream_start(self, element):
        with self.cond:
            self.stream_head = element
            self.cond.notify_all()
        if not self.send_head:
            return
        if self.stream_id:
            self.send(SERVER_HEAD.format(" id=" + quoteattr(self.stream_id)))
        else:
            self.send(SERVER_HEAD.format(""))

    def stream_end(self):
        with self.cond:
            self.stream_ended = True
            self.cond.notify_all()
        self.send("</stream:stream>")
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass

    def stream_element(self, element):
        with self.cond:
            self.received.append(element)
            self.cond.notify_all()
        if element.tag != STANZA_CLIENT_QNP + "iq":
            return
        query = element.find(IQ_AUTH_QNP + "query")
        if query is not None:
            self.handle_auth(element, query)
        elif element.get("type") == "get" and \
                        element.find("{{{0}}}ping".format(TEST_NS)) is not None:
            self.send("<iq type='result' id={0}/>".format(
                                                quoteattr(element.get("id"))))

    def handle_auth(self, element, query):
        """Answer a 'jabber:iq:auth' request."""
        iq_id = quoteattr(element.get("id"))
        if element.get("type") == "get":
            reply = self.discovery_reply
            if reply == "result":
                username = query.findtext(IQ_AUTH_QNP + "username") or ""
                fields = "".join("<{0}/>".format(name)
                                                for name in self.mechanisms)
                self.send("<iq type='result' id={0}>"
                            "<query xmlns='jabber:iq:auth'>"
                            "<username>{1}</username>{2}<resource/>"
                            "</query></iq>".format(iq_id, username, fields))
            elif reply == "error":
                self.send("<iq type='error' id={0}>"
                            "<error code='501'>Not implemented</error>"
                            "</iq>".format(iq_id))
        else:
            reply = self.auth_reply
            if reply == "result":
                self.send("<iq type='result' id={0}/>".format(iq_id))
            elif reply == "error":
                self.send("<iq type='error' id={0}>{1}</iq>".format(iq_id,
                                                            self.auth_error))

class _ServerTestCase(unittest.TestCase):
    """Base class for test cases using a `FakeServer` connected to
    a `SocketTransport` through a socket pair.

    :Ivariables:
        - `server`: the fake server (not started)
        - `transport`: the client end of the connection
    """
    def setUp(self):
        client_sock, server_sock = socket.socketpair()
        self.server = FakeServer(server_sock)
        self.transport = SocketTransport(client_sock)

    def tearDown(self):
        self.transport.close()
        self.server.close()
