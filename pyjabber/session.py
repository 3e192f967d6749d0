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

"""Jabber client session.

A `Session` owns the connection to the server and both of its halves: the
`StanzaWriter` and the `StanzaReader`. Typical use:

    settings = XMPPSettings({"reply_timeout": 10})
    with Session("example.com", settings = settings) as session:
        session.connect()
        session.login("user", "secret")
        session.send_stanza(Message(to_jid = "peer@example.com",
                                                    body = "Hello"))

A closed session cannot be reopened, a new one must be created.
"""

__docformat__ = "restructuredtext en"

import logging
import threading
import time

from .settings import XMPPSettings
from .exceptions import JabberIOError, NotConnectedError
from .exceptions import AlreadyAuthenticatedError, UsageError
from .transport import SocketTransport, TappedTransport
from .reader import StanzaReader
from .writer import StanzaWriter
from .auth import LegacyAuthenticator
from .presence import Presence
from .chat import Chat, GroupChat
from .resolver import resolve_srv
from .debug import StreamObserver

logger = logging.getLogger("pyjabber.session")

class Session(object):
    """Connection to a Jabber server.

    :Ivariables:
        - `settings`: the session settings
        - `debug_observer`: observer of the session traffic
        - `transport`: the transport in use, `None` before `connect`
        - `reader`: the stanza reader
        - `writer`: the stanza writer
        - `authenticator`: the authentication state machine, `None` before
          `login`
        - `lock`: lock serializing the lifecycle operations
        - `_connected`: `True` between successful `connect` and `close`
        - `_closed`: `True` after `close`
    :Types:
        - `settings`: `XMPPSettings`
        - `debug_observer`: `pyjabber.debug.StreamObserver`
        - `transport`: `pyjabber.transport.Transport`
        - `reader`: `StanzaReader`
        - `writer`: `StanzaWriter`
        - `authenticator`: `LegacyAuthenticator`
    """
    # pylint: disable=R0902
    def __init__(self, host, port = None, settings = None,
                                                    debug_observer = None):
        """Create a session. No connection is made until `connect`.

        :Parameters:
            - `host`: the server domain name
            - `port`: the server port (the `c2s_port` setting when not given)
            - `settings`: the settings
            - `debug_observer`: the traffic observer, overrides the
              `debug_observer` setting
        :Types:
            - `host`: `str`
            - `port`: `int`
            - `settings`: `XMPPSettings`
            - `debug_observer`: `pyjabber.debug.StreamObserver`
        """
        self.settings = settings if settings is not None else XMPPSettings()
        self._host = host
        self._port = port if port else self.settings["c2s_port"]
        if debug_observer is None:
            debug_observer = self.settings["debug_observer"]
        self.debug_observer = debug_observer
        self.transport = None
        self.reader = None
        self.writer = None
        self.authenticator = None
        self.lock = threading.RLock()
        self._connected = False
        self._closed = False
        self._user = None
        self._resource = None

    def __repr__(self):
        return "<Session {0}:{1} connected={2!r}>".format(self._host,
                                                self._port, self._connected)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def host(self):
        """The server name."""
        return self._host

    @property
    def port(self):
        """The server port."""
        return self._port

    @property
    def connection_id(self):
        """The stream id assigned by the server, `None` when not connected
        or the server did not provide one."""
        if self.reader is None:
            return None
        return self.reader.stream_id

    @property
    def user(self):
        """The user name after successful login."""
        return self._user

    @property
    def resource(self):
        """The resource after successful login."""
        return self._resource

    def is_connected(self):
        """Check if the session is connected.

        :Returntype: `bool`"""
        return self._connected

    def is_authenticated(self):
        """Check if the user is logged in.

        :Returntype: `bool`"""
        return (self.authenticator is not None
                            and self.authenticator.state == "authenticated")

    def _check_connected(self):
        """Raise `NotConnectedError` if the session is not connected."""
        if not self._connected:
            raise NotConnectedError()

    def _open_transport(self):
        """Make the TCP connection, trying the SRV records first when
        enabled.

        :Returntype: `pyjabber.transport.Transport`
        """
        if self.settings["use_srv"]:
            targets = resolve_srv(self._host, self.settings["c2s_service"])
            if targets:
                error = None
                for host, port in targets:
                    try:
                        transport = SocketTransport.connect(host, port,
                                                                self.settings)
                    except JabberIOError as err:
                        logger.debug("{0}, trying next".format(err))
                        error = err
                        continue
                    self._port = port
                    return transport
                raise error
            logger.debug("No SRV records for {0!r}, connecting directly"
                                                        .format(self._host))
        return SocketTransport.connect(self._host, self._port, self.settings)

    def connect(self, transport = None):
        """Connect to the server: open the transport, start the writer (send
        the stream head) and then start the reader and wait for the server
        stream head.

        :Parameters:
            - `transport`: an already open transport to use instead of a new
              TCP connection
        :Types:
            - `transport`: `pyjabber.transport.Transport`

        :Raise `JabberIOError`: on connection failure.
        """
        with self.lock:
            if self._closed:
                raise NotConnectedError("Session closed, create a new one.")
            if self._connected:
                raise UsageError("Already connected")
            if transport is None:
                transport = self._open_transport()
            if self.debug_observer is not None:
                transport = TappedTransport(transport, self.debug_observer)
            self.transport = transport
            self.writer = StanzaWriter(transport, self._host, self.settings)
            self.reader = StanzaReader(transport, self.settings)
            if self.debug_observer is not None:
                self.reader.add_listener(self.debug_observer.on_dispatch)
            try:
                self.writer.startup()
                self.reader.startup()
            except JabberIOError:
                self._close_step("stopping the reader", self.reader.shutdown,
                                                self.settings["close_grace"])
                self._close_step("closing the transport", transport.close)
                raise
            self._connected = True
            logger.debug("Connected to {0}:{1}, stream id: {2!r}".format(
                            self._host, self._port, self.reader.stream_id))

    def login(self, username, password, resource = None):
        """Log in to the server using the legacy authentication.

        Sends the 'available' presence on success.

        :Parameters:
            - `username`: the user name
            - `password`: the password
            - `resource`: the resource (the `default_resource` setting when
              not given)
        :Types:
            - `username`: `str`
            - `password`: `str`
            - `resource`: `str`

        :Raise `NotConnectedError`: when not connected.
        :Raise `AlreadyAuthenticatedError`: when called a second time.
        :Raise `AuthenticationError`: on authentication failure. The session
            stays connected.
        """
        with self.lock:
            self._check_connected()
            if self.authenticator is not None:
                raise AlreadyAuthenticatedError()
            if resource is None:
                resource = self.settings["default_resource"]
            self.authenticator = LegacyAuthenticator(self.reader, self.writer,
                                        self.reader.stream_id, self.settings)
        self.authenticator.authenticate(username, password, resource)
        self._user = username
        self._resource = resource

    def send_stanza(self, stanza):
        """Send a stanza to the server.

        :Raise `NotConnectedError`: when not connected.
        :Raise `JabberIOError`: on write error.
        """
        self._check_connected()
        self.writer.send_stanza(stanza)

    def add_listener(self, callback, stanza_filter = None):
        """Register a function to be called, in the reader thread, with every
        received stanza passing `stanza_filter` (all stanzas when `None`).

        :Raise `NotConnectedError`: when not connected.
        """
        self._check_connected()
        self.reader.add_listener(callback, stanza_filter)

    def remove_listener(self, callback):
        """Remove a listener. Safe to call at any time, also for listeners
        not registered."""
        reader = self.reader
        if reader is not None:
            reader.remove_listener(callback)

    def create_collector(self, stanza_filter):
        """Create a collector of the received stanzas passing
        `stanza_filter`. The caller must `cancel` it when not needed any
        more, or use it as a context manager.

        :Returntype: `pyjabber.collector.StanzaCollector`

        :Raise `NotConnectedError`: when not connected.
        """
        self._check_connected()
        return self.reader.create_collector(stanza_filter)

    def create_chat(self, participant):
        """Start a chat with `participant`.

        :Parameters:
            - `participant`: the peer address
        :Types:
            - `participant`: `str`

        :Returntype: `pyjabber.chat.Chat`

        :Raise `NotConnectedError`: when not connected.
        """
        self._check_connected()
        return Chat(self, participant)

    def create_group_chat(self, room):
        """Create a group chat in `room`. Call `GroupChat.join` to enter it.

        :Parameters:
            - `room`: the room address
        :Types:
            - `room`: `str`

        :Returntype: `pyjabber.chat.GroupChat`

        :Raise `NotConnectedError`: when not connected.
        """
        self._check_connected()
        return GroupChat(self, room)

    def close(self):
        """Close the session: send the 'unavailable' presence, close the
        stream, stop the reader and close the transport.

        Never raises: every step is attempted even if the previous ones
        failed. Calling it again, or on a session that failed to connect,
        does nothing harmful."""
        with self.lock:
            self._closed = True
            was_connected = self._connected
            self._connected = False
            if was_connected:
                self._close_step("sending unavailable presence",
                            self.writer.send_stanza,
                            Presence(stanza_type = "unavailable"))
            if self.writer is not None:
                self._close_step("closing the stream", self.writer.shutdown)
            if self.reader is not None:
                self._close_step("stopping the reader", self.reader.shutdown,
                                                self.settings["close_grace"])
            time.sleep(self.settings["close_grace"])
            if self.transport is not None:
                self._close_step("closing the transport",
                                                        self.transport.close)
            if was_connected:
                logger.debug("Session with {0!r} closed".format(self._host))

    @staticmethod
    def _close_step(description, function, *args):
        """Run a single `close` step, logging any failure."""
        try:
            function(*args)
        except Exception as err: # pylint: disable=W0703
            logger.debug("Error while {0}: {1}".format(description, err))

XMPPSettings.add_setting("c2s_port", type = int, default = 5222,
        validator = XMPPSettings.get_int_range_validator(1, 65536),
        doc = """Port number for client to server connections."""
    )
XMPPSettings.add_setting("close_grace", type = float, default = 0.1,
        validator = XMPPSettings.validate_positive_float,
        doc = """Time given to the reader to process the last stanzas when the
session is closed (in seconds)."""
    )
XMPPSettings.add_setting("debug_observer", type = StreamObserver,
        doc = """Observer to receive a copy of all the session traffic.
`None` to disable."""
    )

# vi: sts=4 et sw=4
