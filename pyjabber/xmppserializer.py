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

"""Jabber stream serializer for ElementTree data.

The Jabber stream has specific requirements for XML serialization: the
stream root uses the 'stream' prefix and the stanza namespace ('jabber:client'
for a client) is the default namespace of the stream, so it must never be
re-declared on the stanzas."""

__docformat__ = "restructuredtext en"

import re
import threading
from xml.sax.saxutils import escape, quoteattr

from .constants import STANZA_NAMESPACES, STREAM_NS, XML_NS

EVIL_CHARACTERS_RE = re.compile(r"[\000-\010\013\014\016-\037]")

def remove_evil_characters(data):
    """Replace control characters (not allowed in XML) in a string."""
    return EVIL_CHARACTERS_RE.sub("\ufffd", data)

class XMPPSerializer(object):
    """Serializer of a single Jabber stream.

    A single instance of this class should be used for a single stream and
    never reused.

    :Ivariables:
        - `stanza_namespace`: the default namespace of the stream
        - `_head_emitted`: `True` if the stream start tag has been emitted
        - `_next_id`: the next sequence number to be used in auto-generated
          prefixes.
    :Types:
        - `stanza_namespace`: `str`
        - `_head_emitted`: `bool`
        - `_next_id`: `int`
    """
    def __init__(self, stanza_namespace):
        self.stanza_namespace = stanza_namespace
        self._head_emitted = False
        self._next_id = 1

    def emit_head(self, stream_to, stream_from = None, version = "1.0",
                                                            language = None):
        """Return the opening tag of the stream root element.

        :Parameters:
            - `stream_to`: the 'to' attribute of the stream (server name).
              May be `None`.
            - `stream_from`: the 'from' attribute of the stream. May be
              `None`.
            - `version`: the 'version' of the stream. `None` to omit the
              attribute (legacy, pre-XMPP Jabber stream).
            - `language`: the 'xml:lang' of the stream
        :Types:
            - `stream_to`: `str`
            - `stream_from`: `str`
            - `version`: `str`
            - `language`: `str`

        :Returntype: `str`
        """
        tag = "<stream:stream"
        if stream_to:
            tag += " to={0}".format(quoteattr(stream_to))
        if stream_from:
            tag += " from={0}".format(quoteattr(stream_from))
        if version:
            tag += " version={0}".format(quoteattr(version))
        if language:
            tag += " xml:lang={0}".format(quoteattr(language))
        tag += " xmlns={0} xmlns:stream={1}>".format(
                        quoteattr(self.stanza_namespace), quoteattr(STREAM_NS))
        self._head_emitted = True
        return tag

    @staticmethod
    def emit_tail():
        """Return the end tag of the stream root element."""
        return "</stream:stream>"

    def _split_qname(self, name, is_element):
        """Split an element or attribute qname into namespace and local
        name.

        :Return: namespace URI (`None` for no namespace), local name
        """
        if name.startswith("{"):
            namespace, name = name[1:].split("}", 1)
            if namespace in STANZA_NAMESPACES:
                namespace = self.stanza_namespace
        elif is_element:
            raise ValueError("Element with no namespace: {0!r}".format(name))
        else:
            namespace = None
        return namespace, name

    def _make_prefix(self, prefixes):
        """Make up a new namespace prefix, not used in the current scope."""
        used = set(prefixes.values())
        while True:
            prefix = "ns{0}".format(self._next_id)
            self._next_id += 1
            if prefix not in used:
                return prefix

    def _emit_element(self, element, level, default_ns, prefixes):
        """Recursive XML element serializer.

        :Parameters:
            - `element`: the element to serialize
            - `level`: nest level (1 - stanzas, 2 - stanza payload, etc.)
            - `default_ns`: default namespace in the current scope
            - `prefixes`: namespace to prefix mapping declared in the
              current scope
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `level`: `int`
            - `default_ns`: `str`
            - `prefixes`: `dict`

        :Returntype: `str`
        """
        prefixes = dict(prefixes)
        declarations = []
        namespace, local = self._split_qname(element.tag, True)
        if namespace == XML_NS:
            name = "xml:" + local
        elif namespace == default_ns:
            name = local
        else:
            name = local
            default_ns = namespace
            declarations.append(" xmlns={0}".format(quoteattr(namespace)))
        attrs = []
        for attr_name, value in element.items():
            namespace, local = self._split_qname(attr_name, False)
            if namespace is None:
                prefixed = local
            elif namespace == XML_NS:
                prefixed = "xml:" + local
            else:
                prefix = prefixes.get(namespace)
                if prefix is None:
                    prefix = self._make_prefix(prefixes)
                    prefixes[namespace] = prefix
                    declarations.append(" xmlns:{0}={1}".format(prefix,
                                                        quoteattr(namespace)))
                prefixed = prefix + ":" + local
            attrs.append(" {0}={1}".format(prefixed, quoteattr(value)))
        result = "<" + name + "".join(attrs) + "".join(declarations)
        children = [self._emit_element(child, level + 1, default_ns, prefixes)
                                                        for child in element]
        if not children and not element.text:
            result += "/>"
        else:
            result += ">"
            if element.text:
                result += escape(element.text)
            result += "".join(children)
            result += "</{0}>".format(name)
        if level > 1 and element.tail:
            result += escape(element.tail)
        return result

    def emit_stanza(self, element):
        """Serialize a stanza.

        Must be called after `emit_head`.

        :Parameters:
            - `element`: the element to serialize
        :Types:
            - `element`: :etree:`ElementTree.Element`

        :Returntype: `str`
        """
        if not self._head_emitted:
            raise RuntimeError(".emit_head() must be called first.")
        string = self._emit_element(element, 1, self.stanza_namespace,
                                                            {XML_NS: "xml"})
        return remove_evil_characters(string)

# thread local data to store XMPPSerializer instance used by the `serialize`
# function
_THREAD = threading.local()

def serialize(element):
    """Serialize a stanza element outside of any stream.

    Utility function for debugging or logging.

    :Returntype: `str`
    """
    if getattr(_THREAD, "serializer", None) is None:
        _THREAD.serializer = XMPPSerializer("jabber:client")
        _THREAD.serializer.emit_head(None, None)
    return _THREAD.serializer.emit_stanza(element)

# vi: sts=4 et sw=4
