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

"""Byte channel transports.

A transport is a reliable, ordered, bidirectional byte channel with three
operations:

    - `read(size)` -- return up to `size` bytes, empty bytes on end of input,
    - `write(data)` -- write all of `data`,
    - `close()`.

The read half is used only by the `StanzaReader` thread, the write half only
by the `StanzaWriter`.
"""

__docformat__ = "restructuredtext en"

import socket
import logging
from abc import ABCMeta, abstractmethod

from .settings import XMPPSettings
from .exceptions import JabberIOError

logger = logging.getLogger("pyjabber.transport")

class Transport(metaclass = ABCMeta):
    """Abstract base class for byte channel transports."""
    @abstractmethod
    def read(self, size):
        """Read up to `size` bytes. Block until some data is available.

        :Return: the data read, empty bytes on end of input.
        :Returntype: `bytes`

        :Raise `JabberIOError`: on read error.
        """
        raise NotImplementedError

    @abstractmethod
    def write(self, data):
        """Write the whole `data`.

        :Raise `JabberIOError`: on write error.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """Close the channel. Pending and future reads return end of
        input."""
        raise NotImplementedError

class SocketTransport(Transport):
    """TCP socket transport.

    :Ivariables:
        - `address`: the (host, port) connected to
        - `_socket`: the socket
    """
    def __init__(self, sock, address = None):
        self._socket = sock
        self.address = address

    @classmethod
    def connect(cls, host, port, settings = None):
        """Open a TCP connection.

        :Parameters:
            - `host`: server name or address
            - `port`: port number
            - `settings`: settings (`connect_timeout` is used)
        :Types:
            - `host`: `str`
            - `port`: `int`
            - `settings`: `XMPPSettings`

        :Returntype: `SocketTransport`

        :Raise `JabberIOError`: when the connection cannot be established.
        """
        if settings is None:
            settings = XMPPSettings()
        timeout = settings["connect_timeout"]
        logger.debug("Connecting to {0}:{1}".format(host, port))
        try:
            sock = socket.create_connection((host, port), timeout)
        except (OSError, ValueError) as err:
            raise JabberIOError("Could not connect to {0}:{1}: {2}"
                                                .format(host, port, err))
        # reads block until data or end of stream
        sock.settimeout(None)
        return cls(sock, (host, port))

    def read(self, size):
        sock = self._socket
        if sock is None:
            return b""
        try:
            return sock.recv(size)
        except OSError as err:
            if self._socket is None:
                return b""
            raise JabberIOError("Read error: {0}".format(err))

    def write(self, data):
        sock = self._socket
        if sock is None:
            raise JabberIOError("Connection closed")
        try:
            sock.sendall(data)
        except OSError as err:
            raise JabberIOError("Write error: {0}".format(err))

    def close(self):
        sock = self._socket
        if sock is None:
            return
        self._socket = None
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # not connected any more
            pass
        sock.close()

class TappedTransport(Transport):
    """Transport wrapper passing copies of the data read and written to
    an observer.

    The data and the calls are forwarded unchanged.

    :Ivariables:
        - `transport`: the wrapped transport
        - `observer`: the observer
    :Types:
        - `transport`: `Transport`
        - `observer`: `pyjabber.debug.StreamObserver`
    """
    def __init__(self, transport, observer):
        self.transport = transport
        self.observer = observer

    def read(self, size):
        data = self.transport.read(size)
        if data:
            self._notify(self.observer.on_read, data)
        return data

    def write(self, data):
        self.transport.write(data)
        self._notify(self.observer.on_write, data)

    @staticmethod
    def _notify(method, data):
        """Pass data to an observer method, an observer failure does not
        affect the stream."""
        try:
            method(data)
        except Exception: # pylint: disable=W0703
            logger.exception("Stream observer failed")

    def close(self):
        self.transport.close()

XMPPSettings.add_setting("connect_timeout", type = float, default = 10.0,
        validator = XMPPSettings.validate_positive_float,
        doc = """Timeout for establishing the TCP connection (in seconds)."""
    )
XMPPSettings.add_setting("read_buffer_size", type = int, default = 4096,
        validator = XMPPSettings.validate_positive_int,
        doc = """Maximum number of bytes read from the transport at once."""
    )

# vi: sts=4 et sw=4
