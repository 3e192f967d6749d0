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

"""Stanza collectors.

A collector buffers the incoming stanzas passing its filter, so a thread may
send a request and then wait for the reply:

    with session.create_collector(StanzaIdFilter(request.stanza_id)) as coll:
        session.send_stanza(request)
        reply = coll.next_result(5)

Collectors are created by the `StanzaReader` (usually through
`Session.create_collector`) and must be cancelled when not needed any more,
otherwise they would buffer the matching traffic forever. Leaving the `with`
block cancels the collector.
"""

__docformat__ = "restructuredtext en"

import logging
import threading
from collections import deque

from .filters import filter_matches
from .settings import XMPPSettings

logger = logging.getLogger("pyjabber.collector")

class StanzaCollector(object):
    """Bounded, thread-safe buffer of stanzas matching a filter.

    The reader thread adds stanzas with `process_stanza`, any other thread
    reads them with `poll_result` or `next_result`. When the buffer is full,
    the oldest stanza is dropped.

    :Ivariables:
        - `stanza_filter`: the filter (`None` to collect everything)
        - `_registry`: the object the collector is registered with
        - `_buffer`: the collected stanzas
        - `_cond`: condition variable guarding the buffer and flags
        - `_cancelled`: `True` after `cancel`
        - `_released`: `True` when the stanza source has stopped
        - `_timeout`: default `next_result` timeout
    :Types:
        - `stanza_filter`: `StanzaFilter`
        - `_registry`: `StanzaReader`
        - `_buffer`: `collections.deque`
        - `_cond`: `threading.Condition`
        - `_cancelled`: `bool`
        - `_released`: `bool`
        - `_timeout`: `float`
    """
    # pylint: disable=R0902
    def __init__(self, registry, stanza_filter, settings = None):
        """Initialize the collector.

        :Parameters:
            - `registry`: object to deregister from on `cancel`, must
              provide `remove_collector`
            - `stanza_filter`: the filter
            - `settings`: the settings (`collector_capacity` and
              `reply_timeout` are used)
        :Types:
            - `registry`: `StanzaReader`
            - `stanza_filter`: `StanzaFilter`
            - `settings`: `XMPPSettings`
        """
        if settings is None:
            settings = XMPPSettings()
        self.stanza_filter = stanza_filter
        self._registry = registry
        self._buffer = deque(maxlen = settings["collector_capacity"])
        self._cond = threading.Condition()
        self._cancelled = False
        self._released = False
        self._timeout = settings["reply_timeout"]

    def __repr__(self):
        return "<StanzaCollector {0!r}>".format(self.stanza_filter)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.cancel()

    @property
    def cancelled(self):
        """`True` when the collector was cancelled."""
        return self._cancelled

    def process_stanza(self, stanza):
        """Add the stanza to the buffer if it passes the filter and wake up
        the waiting threads.

        Called by the reader thread.

        :Returntype: `bool`
        :Return: `True` if the stanza has been accepted.
        """
        if not filter_matches(self.stanza_filter, stanza):
            return False
        with self._cond:
            if self._cancelled:
                return False
            if len(self._buffer) == self._buffer.maxlen:
                logger.debug("{0!r} full, dropping the oldest stanza"
                                                                .format(self))
            self._buffer.append(stanza)
            self._cond.notify_all()
        return True

    def release(self):
        """Wake up all the waiting threads, because no more stanzas will come.

        Called by the reader when it stops. The stanzas already buffered
        are still available."""
        with self._cond:
            self._released = True
            self._cond.notify_all()

    def poll_result(self):
        """Remove and return the oldest buffered stanza, without waiting.

        :Return: the stanza or `None` when the buffer is empty.
        :Returntype: `Stanza`
        """
        with self._cond:
            if self._buffer:
                return self._buffer.popleft()
            return None

    def next_result(self, timeout = None):
        """Remove and return the oldest buffered stanza, waiting for one if the
        buffer is empty.

        :Parameters:
            - `timeout`: maximum time to wait (in seconds). The `reply_timeout`
              setting is used when not given, there is no unbounded wait.
        :Types:
            - `timeout`: `float`

        :Return: the stanza or `None` on timeout, when the collector is
            cancelled or when the reader has stopped.
        :Returntype: `Stanza`
        """
        if timeout is None:
            timeout = self._timeout
        with self._cond:
            self._cond.wait_for(lambda: self._buffer or self._cancelled
                                            or self._released, timeout)
            if self._buffer:
                return self._buffer.popleft()
            return None

    def cancel(self):
        """Deregister the collector and discard the buffered stanzas.

        Calling it more than once does nothing."""
        with self._cond:
            if self._cancelled:
                return
            self._cancelled = True
            self._buffer.clear()
            self._cond.notify_all()
        self._registry.remove_collector(self)

XMPPSettings.add_setting("collector_capacity", type = int, default = 65536,
        validator = XMPPSettings.validate_positive_int,
        doc = """Maximum number of stanzas buffered by a single collector.
The oldest stanza is dropped when the limit is reached."""
    )
XMPPSettings.add_setting("reply_timeout", type = float, default = 5.0,
        validator = XMPPSettings.validate_positive_float,
        doc = """Time to wait for a reply to a request (in seconds). This is
the default timeout of `StanzaCollector.next_result`."""
    )

# vi: sts=4 et sw=4
