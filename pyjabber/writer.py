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

"""Outgoing side of a Jabber session."""

__docformat__ = "restructuredtext en"

import logging
import threading

from .settings import XMPPSettings
from .constants import STANZA_CLIENT_NS, DEFAULT_STREAM_VERSION
from .exceptions import JabberIOError
from .xmppserializer import XMPPSerializer

logger = logging.getLogger("pyjabber.writer")

class StanzaWriter(object):
    """Serializes stanzas and writes them to the transport.

    There is no writer thread: `send_stanza` writes in the caller's thread.
    Concurrent senders are serialized with a lock, so stanzas are never
    interleaved and are written in the order the lock is acquired.
    There is no buffering and no retry, a write error is raised to the
    caller.

    :Ivariables:
        - `transport`: the transport to write to
        - `host`: the server domain name, the 'to' of the stream head
        - `settings`: the settings
        - `lock`: the write lock
        - `_serializer`: the stream serializer, `None` before `startup` and
          after `shutdown`
    :Types:
        - `transport`: `pyjabber.transport.Transport`
        - `host`: `str`
        - `settings`: `XMPPSettings`
        - `lock`: `threading.Lock`
        - `_serializer`: `XMPPSerializer`
    """
    def __init__(self, transport, host, settings = None):
        self.transport = transport
        self.host = host
        self.settings = settings if settings is not None else XMPPSettings()
        self.lock = threading.Lock()
        self._serializer = None
        self._closed = False

    def startup(self):
        """Write the stream head.

        :Raise `JabberIOError`: on write error."""
        with self.lock:
            if self._serializer is not None or self._closed:
                raise RuntimeError("Writer already started")
            self._serializer = XMPPSerializer(STANZA_CLIENT_NS)
            head = self._serializer.emit_head(self.host,
                            version = self.settings["stream_version"],
                            language = self.settings["language"])
            logger.debug("Opening stream to {0!r}".format(self.host))
            self._write(head)

    def send_stanza(self, stanza):
        """Serialize and write a stanza.

        :Parameters:
            - `stanza`: the stanza to send
        :Types:
            - `stanza`: `Stanza`

        :Raise `JabberIOError`: when the writer is not running or on
            a write error.
        """
        with self.lock:
            if self._serializer is None:
                raise JabberIOError("Stream not open for writing")
            data = self._serializer.emit_stanza(stanza.get_xml())
            self._write(data)

    def shutdown(self):
        """Write the stream tail. No stanzas can be sent after that.

        Does nothing when the writer is not running."""
        with self.lock:
            if self._serializer is None:
                return
            self._serializer = None
            self._closed = True
            logger.debug("Closing stream to {0!r}".format(self.host))
            self._write(XMPPSerializer.emit_tail())

    def is_running(self):
        """Check if stanzas may be sent.

        :Returntype: `bool`"""
        with self.lock:
            return self._serializer is not None

    def _write(self, data):
        """Encode and write data to the transport.

        [called with `lock` acquired]"""
        self.transport.write(data.encode("utf-8"))

XMPPSettings.add_setting("stream_version", type = str,
        default = DEFAULT_STREAM_VERSION,
        doc = """The 'version' of the stream head. Set to `None` to omit
the attribute and open a legacy (pre-XMPP 1.0) Jabber stream."""
    )
XMPPSettings.add_setting("language", type = str,
        doc = """The 'xml:lang' of the stream head, `None` to omit it."""
    )

# vi: sts=4 et sw=4
