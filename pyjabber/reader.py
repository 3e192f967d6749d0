#
# (C) Copyright 2011 Jacek Konieczny <jajcus@jajcus.net>
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License Version
# 2.1 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program; if not, write to the Free Software
# Foundation, Inc., 675 Mass Ave, Cambridge, MA 02139, USA.
#

"""Incoming side of a Jabber session.

The `StanzaReader` runs a thread reading the server stream, decoding it into
stanzas and passing every stanza, in the order received, to the registered
listeners and collectors."""

__docformat__ = "restructuredtext en"

import logging
import threading

from .settings import XMPPSettings
from .exceptions import JabberIOError, StreamParseError, StanzaDecodeError
from .filters import filter_matches
from .collector import StanzaCollector
from .xmppparser import StreamReader, XMLStreamHandler, stanza_factory

logger = logging.getLogger("pyjabber.reader")

class StanzaReader(XMLStreamHandler):
    """Reads the server stream in a separate thread and dispatches
    the stanzas.

    The listener and collector registries may be changed from any thread,
    dispatching uses a snapshot taken with the lock held.

    :Ivariables:
        - `transport`: the transport to read from
        - `settings`: the settings
        - `stream_id`: the 'id' attribute of the server stream head (`None`
          until received or when not provided by the server)
        - `error`: the exception which stopped the reader, if any
        - `lock`: lock protecting the registries and the state
        - `_listeners`: the (callback, filter) pairs registered
        - `_collectors`: the live collectors
        - `_thread`: the reader thread
        - `_started`: `True` after the stream head has been received
        - `_stopped`: `True` after the reader loop has finished
        - `_done`: `True` when shutdown has been requested
        - `_state_cond`: condition to signal `_started` and `_stopped`
          changes
    :Types:
        - `transport`: `pyjabber.transport.Transport`
        - `settings`: `XMPPSettings`
        - `stream_id`: `str`
        - `error`: `Exception`
        - `lock`: `threading.RLock`
        - `_listeners`: `list` of (callable, `StanzaFilter`)
        - `_collectors`: `list` of `StanzaCollector`
        - `_thread`: `threading.Thread`
    """
    # pylint: disable=R0902
    def __init__(self, transport, settings = None):
        """Initialize the reader.

        :Parameters:
            - `transport`: the transport to read from
            - `settings`: the settings
        :Types:
            - `transport`: `pyjabber.transport.Transport`
            - `settings`: `XMPPSettings`
        """
        XMLStreamHandler.__init__(self)
        self.transport = transport
        self.settings = settings if settings is not None else XMPPSettings()
        self.stream_id = None
        self.error = None
        self.lock = threading.RLock()
        self._state_cond = threading.Condition(self.lock)
        self._listeners = []
        self._collectors = []
        self._parser = StreamReader(self)
        self._thread = None
        self._started = False
        self._stopped = False
        self._done = False

    def startup(self, timeout = None):
        """Start the reader thread and wait for the server stream head.

        :Parameters:
            - `timeout`: maximum time to wait for the stream head (the
              `startup_timeout` setting when not given)
        :Types:
            - `timeout`: `float`

        :Raise `JabberIOError`: when no stream head is received in time or
            the connection fails before that.
        """
        if timeout is None:
            timeout = self.settings["startup_timeout"]
        with self.lock:
            if self._thread is not None:
                raise RuntimeError("Reader already started")
            self._thread = threading.Thread(name = "StanzaReader",
                                                        target = self._run)
            self._thread.daemon = True
            self._thread.start()
            self._state_cond.wait_for(lambda: self._started or self._stopped,
                                                                    timeout)
            started = self._started
            stopped = self._stopped
            error = self.error
        if not started:
            self.shutdown()
            if error is not None:
                raise JabberIOError("Connection failed: {0}".format(error))
            if stopped:
                raise JabberIOError("Connection closed before the stream"
                                                                " start")
            raise JabberIOError("Server did not open the stream"
                                    " within {0} seconds".format(timeout))
        logger.debug("Stream started, id: {0!r}".format(self.stream_id))

    def shutdown(self, timeout = None):
        """Stop the reader and release all waiting collectors.

        May be called from any thread, including the reader thread itself
        (e.g. from a listener). Waits for the reader thread to finish, unless
        called from it.

        :Parameters:
            - `timeout`: maximum time to wait for the thread (the
              `shutdown_timeout` setting when not given). The thread may stay
              blocked on read until the transport is closed.
        :Types:
            - `timeout`: `float`
        """
        if timeout is None:
            timeout = self.settings["shutdown_timeout"]
        with self.lock:
            self._done = True
            thread = self._thread
        self._release_collectors()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.debug("Reader thread still blocked on read")

    def is_running(self):
        """Check if the reader loop is running.

        :Returntype: `bool`"""
        with self.lock:
            return self._thread is not None and not self._stopped

    def _run(self):
        """The reader thread main loop."""
        logger.debug("Reader thread started")
        read_size = self.settings["read_buffer_size"]
        try:
            while not self._done:
                try:
                    data = self.transport.read(read_size)
                except JabberIOError as err:
                    if not self._done:
                        logger.error("Connection error: {0}".format(err))
                        self.error = err
                    break
                if not data:
                    logger.debug("End of input")
                    self._parser.feed(b"")
                    break
                try:
                    self._parser.feed(data)
                except StreamParseError as err:
                    logger.error("Stream parse error: {0}".format(err))
                    self.error = err
                    break
        finally:
            with self.lock:
                self._stopped = True
                self._state_cond.notify_all()
            self._release_collectors()
            logger.debug("Reader thread finished")

    def _release_collectors(self):
        """Wake up all the threads waiting on the collectors."""
        with self.lock:
            collectors = list(self._collectors)
        for collector in collectors:
            collector.release()

    def stream_start(self, element):
        """Handle the server stream head.

        [called from the reader thread]"""
        with self.lock:
            self.stream_id = element.get("id")
            self._started = True
            self._state_cond.notify_all()

    def stream_end(self):
        """Handle the server stream end.

        [called from the reader thread]"""
        logger.debug("Server closed the stream")
        with self.lock:
            self._done = True

    def stream_element(self, element):
        """Decode and dispatch a received stanza.

        [called from the reader thread]"""
        try:
            stanza = stanza_factory(element)
        except StanzaDecodeError as err:
            err.log_ignored()
            return
        self.dispatch(stanza)

    def dispatch(self, stanza):
        """Pass the stanza to all the listeners and collectors with
        a matching filter.

        A listener or a collector filter raising an exception does not stop
        the dispatching.

        :Parameters:
            - `stanza`: the stanza
        :Types:
            - `stanza`: `Stanza`
        """
        with self.lock:
            listeners = list(self._listeners)
            collectors = list(self._collectors)
        for callback, stanza_filter in listeners:
            try:
                if filter_matches(stanza_filter, stanza):
                    callback(stanza)
            except Exception: # pylint: disable=W0703
                logger.exception("Exception in stanza listener {0!r}"
                                                            .format(callback))
        for collector in collectors:
            try:
                collector.process_stanza(stanza)
            except Exception: # pylint: disable=W0703
                logger.exception("Exception in stanza collector {0!r}"
                                                            .format(collector))

    def add_listener(self, callback, stanza_filter = None):
        """Register a stanza listener.

        :Parameters:
            - `callback`: function to call with each matching stanza. Called
              in the reader thread, should not block.
            - `stanza_filter`: the filter, `None` to get all stanzas
        :Types:
            - `callback`: callable
            - `stanza_filter`: `StanzaFilter`
        """
        with self.lock:
            self._listeners.append((callback, stanza_filter))

    def remove_listener(self, callback):
        """Remove a stanza listener. Does nothing if the listener is not
        registered."""
        with self.lock:
            self._listeners = [(cbk, flt) for (cbk, flt) in self._listeners
                                                        if cbk != callback]

    def create_collector(self, stanza_filter):
        """Create and register a new stanza collector.

        If the reader has already stopped the collector is returned released,
        so waiting on it does not block.

        :Parameters:
            - `stanza_filter`: the filter
        :Types:
            - `stanza_filter`: `StanzaFilter`

        :Returntype: `StanzaCollector`
        """
        collector = StanzaCollector(self, stanza_filter, self.settings)
        with self.lock:
            self._collectors.append(collector)
            stopped = self._stopped or self._done
        if stopped:
            collector.release()
        return collector

    def remove_collector(self, collector):
        """Deregister a collector. Does nothing if it is not registered."""
        with self.lock:
            try:
                self._collectors.remove(collector)
            except ValueError:
                pass

XMPPSettings.add_setting("startup_timeout", type = float, default = 10.0,
        validator = XMPPSettings.validate_positive_float,
        doc = """Time to wait for the server stream head (in seconds)."""
    )
XMPPSettings.add_setting("shutdown_timeout", type = float, default = 1.0,
        validator = XMPPSettings.validate_positive_float,
        doc = """Time to wait for the reader thread to finish on shutdown (in
seconds)."""
    )

# vi: sts=4 et sw=4
