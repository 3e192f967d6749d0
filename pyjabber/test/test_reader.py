#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import time
import socket
import threading
import unittest

from pyjabber.exceptions import JabberIOError
from pyjabber.filters import StanzaClassFilter, StanzaIdFilter, FunctionFilter
from pyjabber.iq import Iq
from pyjabber.message import Message
from pyjabber.reader import StanzaReader
from pyjabber.transport import SocketTransport

from pyjabber.test._util import make_settings, SERVER_HEAD, TIMEOUT

class TestStanzaReader(unittest.TestCase):
    def setUp(self):
        client_sock, self.server_sock = socket.socketpair()
        self.transport = SocketTransport(client_sock)
        self.settings = make_settings(startup_timeout = 0.5,
                                                    shutdown_timeout = 0.5)
        self.reader = StanzaReader(self.transport, self.settings)

    def tearDown(self):
        self.transport.close()
        self.reader.shutdown()
        self.server_sock.close()

    def send(self, data):
        self.server_sock.sendall(data.encode("utf-8"))

    def start(self, stream_id = "abc"):
        if stream_id:
            self.send(SERVER_HEAD.format(" id='{0}'".format(stream_id)))
        else:
            self.send(SERVER_HEAD.format(""))
        self.reader.startup()

    def test_startup(self):
        self.start()
        self.assertTrue(self.reader.is_running())
        self.assertEqual(self.reader.stream_id, "abc")

    def test_startup_no_id(self):
        self.start(None)
        self.assertIsNone(self.reader.stream_id)

    def test_startup_timeout(self):
        with self.assertRaises(JabberIOError) as context:
            self.reader.startup()
        self.assertIn("did not open the stream", str(context.exception))

    def test_startup_closed(self):
        self.server_sock.shutdown(socket.SHUT_WR)
        with self.assertRaises(JabberIOError) as context:
            self.reader.startup()
        self.assertIn("closed", str(context.exception))
        self.assertFalse(self.reader.is_running())

    def test_startup_garbage(self):
        self.send("<<<garbage")
        with self.assertRaises(JabberIOError):
            self.reader.startup()

    def test_dispatch_order(self):
        received = []
        done = threading.Event()
        def listener(stanza):
            received.append(stanza.body)
            if len(received) == 3:
                done.set()
        self.reader.add_listener(listener, StanzaClassFilter(Message))
        self.start()
        self.send("<message><body>1</body></message>"
                    "<iq type='result' id='x'/>"
                    "<message><body>2</body></message>")
        self.send("<message><body>3</body></message>")
        self.assertTrue(done.wait(TIMEOUT))
        self.assertEqual(received, ["1", "2", "3"])

    def test_listener_exception(self):
        received = []
        done = threading.Event()
        def bad_listener(stanza):
            raise ValueError("test")
        def listener(stanza):
            received.append(stanza)
            done.set()
        self.reader.add_listener(bad_listener)
        self.reader.add_listener(listener)
        self.start()
        self.send("<iq type='result' id='x'/>")
        self.assertTrue(done.wait(TIMEOUT))
        self.assertTrue(self.reader.is_running())

    def test_collector_filter_exception(self):
        def bad_filter(stanza):
            if stanza.stanza_id == "1":
                raise KeyError("test")
            return False
        bad = self.reader.create_collector(FunctionFilter(bad_filter))
        good = self.reader.create_collector(StanzaIdFilter("2"))
        self.start()
        self.send("<iq type='result' id='1'/><iq type='result' id='2'/>")
        stanza = good.next_result(TIMEOUT)
        self.assertIsNotNone(stanza)
        self.assertEqual(stanza.stanza_id, "2")
        self.assertIsNone(bad.poll_result())
        self.assertTrue(self.reader.is_running())
        bad.cancel()
        good.cancel()

    def test_remove_listener(self):
        received = []
        def listener(stanza):
            received.append(stanza)
        self.reader.add_listener(listener)
        self.reader.add_listener(listener)
        self.reader.remove_listener(listener)
        self.reader.remove_listener(listener)
        collector = self.reader.create_collector(None)
        self.start()
        self.send("<iq type='result' id='x'/>")
        self.assertIsNotNone(collector.next_result(TIMEOUT))
        self.assertEqual(received, [])

    def test_malformed_stanza(self):
        collector = self.reader.create_collector(None)
        self.start()
        self.send("<iq type='bogus' id='1'/><iq type='result' id='2'/>")
        result = collector.next_result(TIMEOUT)
        self.assertIsInstance(result, Iq)
        self.assertEqual(result.stanza_id, "2")

    def test_unknown_element(self):
        collector = self.reader.create_collector(None)
        self.start()
        self.send("<stream:features><x xmlns='urn:example'/>"
                                                    "</stream:features>")
        result = collector.next_result(TIMEOUT)
        self.assertEqual(result.element_name, "features")

    def test_parse_error(self):
        collector = self.reader.create_collector(None)
        self.start()
        self.send("<iq type='get'></message>")
        start = time.time()
        self.assertIsNone(collector.next_result(TIMEOUT))
        self.assertTrue(time.time() - start < TIMEOUT - 1)
        self.assertIsNotNone(self.reader.error)

    def test_shutdown_releases_many_collectors(self):
        collectors = [self.reader.create_collector(StanzaIdFilter(str(i)))
                                                            for i in range(5)]
        self.start()
        results = [False] * len(collectors)
        waiting = threading.Semaphore(0)
        def wait(index):
            waiting.release()
            results[index] = collectors[index].next_result(TIMEOUT)
        threads = [threading.Thread(target = wait, args = (index,))
                                        for index in range(len(collectors))]
        for thread in threads:
            thread.start()
        for thread in threads:
            waiting.acquire()
        start = time.time()
        self.reader.shutdown()
        for thread in threads:
            thread.join(TIMEOUT)
            self.assertFalse(thread.is_alive())
        self.assertTrue(time.time() - start < TIMEOUT - 1)
        self.assertEqual(results, [None] * len(collectors))

    def test_server_stream_end(self):
        collector = self.reader.create_collector(None)
        self.start()
        self.send("<iq type='result' id='1'/></stream:stream>")
        self.assertEqual(collector.next_result(TIMEOUT).stanza_id, "1")
        self.assertIsNone(collector.next_result(TIMEOUT))
        self.assertFalse(self.reader.is_running())
        self.assertIsNone(self.reader.error)

    def test_shutdown_from_listener(self):
        done = threading.Event()
        def listener(stanza):
            self.reader.shutdown()
            done.set()
        self.reader.add_listener(listener)
        self.start()
        self.send("<iq type='result' id='1'/>")
        self.assertTrue(done.wait(TIMEOUT))

    def test_shutdown_releases_collectors(self):
        collector = self.reader.create_collector(None)
        self.start()
        timer = threading.Timer(0.1, self.reader.shutdown)
        timer.start()
        start = time.time()
        try:
            self.assertIsNone(collector.next_result(TIMEOUT))
        finally:
            timer.join()
        self.assertTrue(time.time() - start < TIMEOUT - 1)

# pylint: disable=W0611
from pyjabber.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
