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

"""Parser for Jabber XML stream.

The stream is a single XML document received in arbitrary chunks. The
`StreamReader` feeds the chunks to an incremental ElementTree parser and
reports the stream root start tag, every complete second-level element
(stanza) and the stream end to an `XMLStreamHandler`."""

__docformat__ = "restructuredtext en"

import logging

from .etree import ElementTree
from .constants import STANZA_NAMESPACES
from .exceptions import StreamParseError
from .stanza import Stanza
from .iq import Iq
from .message import Message
from .presence import Presence

logger = logging.getLogger("pyjabber.xmppparser")

STANZA_CLASSES = {
        "iq": Iq,
        "message": Message,
        "presence": Presence,
    }

class XMLStreamHandler(object):
    """Base class for stream handler, used as a target for the
    `StreamReader`."""
    # pylint: disable=R0201
    def stream_start(self, element):
        """Called when the start tag of root element is encountered
        in the stream.

        :Parameters:
            - `element`: the root element
        :Types:
            - `element`: :etree:`ElementTree.Element`"""
        logger.error("Unhandled stream start: {0!r}".format(element))

    def stream_end(self):
        """Called when the end tag of root element is encountered
        in the stream.
        """
        logger.error("Unhandled stream end")

    def stream_element(self, element):
        """Called when the end tag of a direct child of the root
        element is encountered in the stream.

        :Parameters:
            - `element`: the (complete) element being processed
        :Types:
            - `element`: :etree:`ElementTree.Element`"""
        logger.error("Unhandled stanza: {0!r}".format(element))

class StreamReader(object):
    """XML stream reader.

    :Ivariables:
        - `handler`: object to receive parsed stream elements
        - `parser`: the ElementTree incremental parser
        - `_root`: the stream root element
        - `_depth`: current element nesting level
        - `_ended`: `True` after the stream end was reported
    :Types:
        - `handler`: `XMLStreamHandler`
        - `parser`: :etree:`ElementTree.XMLPullParser`
        - `_root`: :etree:`ElementTree.Element`
        - `_depth`: `int`
        - `_ended`: `bool`
    """
    def __init__(self, handler):
        """Initialize the reader.

        :Parameters:
            - `handler`: Object to handle stream start, end and stanzas.
        :Types:
            - `handler`: `XMLStreamHandler`
        """
        self.handler = handler
        self.parser = ElementTree.XMLPullParser(events = ("start", "end"))
        self._root = None
        self._depth = 0
        self._ended = False
        # Expat >= 2.6 defers parsing of tokens split between chunks
        self._flush = getattr(self.parser, "flush", None)

    def feed(self, data):
        """Feed the parser with a chunk of data. Apropriate methods
        of `handler` will be called whenever something interesting is
        found.

        :Parameters:
            - `data`: the chunk of data to parse. Empty string or bytes
              mean end of input.
        :Types:
            - `data`: `bytes` or `str`

        :Raise `StreamParseError`: when the data is not well-formed XML.
        """
        if self._ended:
            return
        if not data:
            if self._root is not None:
                self._ended = True
                self.handler.stream_end()
            return
        try:
            self.parser.feed(data)
            if self._flush is not None:
                self._flush()
            events = list(self.parser.read_events())
        except ElementTree.ParseError as err:
            raise StreamParseError(str(err))
        for event, element in events:
            if self._ended:
                break
            self._process_event(event, element)

    def _process_event(self, event, element):
        """Handle single parser event."""
        if event == "start":
            self._depth += 1
            if self._depth == 1:
                self._root = element
                self.handler.stream_start(element)
            return
        self._depth -= 1
        if self._depth == 1:
            self._root.remove(element)
            self.handler.stream_element(element)
        elif self._depth == 0:
            self._ended = True
            self.handler.stream_end()

def stanza_factory(element):
    """Creates Iq, Message or Presence object for XML stanza `element`.
    Other stream elements are wrapped in a plain `Stanza`.

    :Parameters:
        - `element`: the stanza XML element
    :Types:
        - `element`: :etree:`ElementTree.Element`

    :Raise `StanzaDecodeError`: for a malformed stanza.
    :Returntype: `Stanza`
    """
    tag = element.tag
    if tag.startswith("{"):
        namespace, name = tag[1:].split("}", 1)
    else:
        namespace, name = None, tag
    klass = None
    if namespace is None or namespace in STANZA_NAMESPACES:
        klass = STANZA_CLASSES.get(name)
    if klass is None:
        return Stanza(element)
    return klass(element)

# vi: sts=4 et sw=4
