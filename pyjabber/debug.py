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

"""Session traffic observers.

An observer passed to a `Session` (or set as the `debug_observer` setting)
gets a copy of every chunk of data read from and written to the server and
of every stanza dispatched by the reader. Observers must not modify the data
and should return quickly, as they are called from the I/O paths.
"""

__docformat__ = "restructuredtext en"

import logging
from abc import ABCMeta, abstractmethod

class StreamObserver(metaclass = ABCMeta):
    """Base class for session traffic observers."""
    @abstractmethod
    def on_read(self, data):
        """Called with data read from the server.

        :Types:
            - `data`: `bytes`
        """
        raise NotImplementedError

    @abstractmethod
    def on_write(self, data):
        """Called with data written to the server.

        :Types:
            - `data`: `bytes`
        """
        raise NotImplementedError

    @abstractmethod
    def on_dispatch(self, stanza):
        """Called for every stanza dispatched to the listeners.

        :Types:
            - `stanza`: `Stanza`
        """
        raise NotImplementedError

class LoggingObserver(StreamObserver):
    """Observer logging the session traffic at DEBUG level.

    Raw data goes to the 'pyjabber.debug.in' and 'pyjabber.debug.out'
    loggers, dispatched stanzas to 'pyjabber.debug.stanza'."""
    in_logger = logging.getLogger("pyjabber.debug.in")
    out_logger = logging.getLogger("pyjabber.debug.out")
    stanza_logger = logging.getLogger("pyjabber.debug.stanza")

    def on_read(self, data):
        self.in_logger.debug("IN: %r", data)

    def on_write(self, data):
        self.out_logger.debug("OUT: %r", data)

    def on_dispatch(self, stanza):
        if self.stanza_logger.isEnabledFor(logging.DEBUG):
            self.stanza_logger.debug("Dispatched: %s", stanza.serialize())

# vi: sts=4 et sw=4
