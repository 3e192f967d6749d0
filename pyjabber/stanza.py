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

"""General Jabber stanza handling.

Stanzas are the protocol units exchanged over the stream: <iq/>, <message/>
and <presence/>. Addresses ('to' and 'from') are kept as opaque strings.

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

import random
import string
import threading

from .etree import ElementTree, ElementClass
from .constants import STANZA_CLIENT_NS
from .exceptions import StanzaDecodeError
from .error import StanzaErrorElement
from .stanzapayload import StanzaPayload, XMLPayload, payload_factory
from .xmppserializer import serialize

_ID_LOCK = threading.Lock()
_ID_PREFIX = "".join(random.choice(string.ascii_letters + string.digits)
                                                        for _ in range(5))
_last_id = 0

def gen_id():
    """Generate stanza id unique for the process lifetime (so also for
    every session).

    :Returntype: `str`"""
    global _last_id # pylint: disable=W0603
    with _ID_LOCK:
        _last_id += 1
        return "{0}-{1}".format(_ID_PREFIX, _last_id)

class Stanza(object):
    """Base class for all Jabber stanzas.

    :Properties:
        - `from_jid`: source address of the stanza
        - `to_jid`: destination address of the stanza
        - `stanza_type`: stanza type, e.g. "get", "result" or "unavailable"
        - `stanza_id`: stanza id
        - `error`: error associated with a stanza of type "error"
    :Ivariables:
        - `_payload`: the stanza payload
        - `_namespace`: namespace of this stanza element
    :Types:
        - `from_jid`: `str`
        - `to_jid`: `str`
        - `stanza_type`: `str`
        - `stanza_id`: `str`
        - `error`: `StanzaErrorElement`
        - `_payload`: `list` of `StanzaPayload`
    """
    # pylint: disable=R0902
    element_name = "Unknown"
    auto_id = False
    def __init__(self, element, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            error = None, error_cond = None):
        """Initialize a Stanza object.

        :Parameters:
            - `element`: XML element of this stanza, or element name for a new
              stanza. If element is given it must not be modified later.
            - `from_jid`: sender address.
            - `to_jid`: recipient address.
            - `stanza_type`: value of the stanza's "type" attribute.
            - `stanza_id`: stanza id, value of the stanza's "id" attribute.
              For new stanzas of classes with `auto_id` set a unique value is
              generated when not given.
            - `error`: error object. Ignored if `stanza_type` is not "error".
            - `error_cond`: error condition name. Ignored if `stanza_type` is
              not "error" or `error` is not None.
        :Types:
            - `element`: `str` or :etree:`ElementTree.Element`
            - `from_jid`: `str`
            - `to_jid`: `str`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `error`: `StanzaErrorElement`
            - `error_cond`: `str`
        """
        # pylint: disable=R0913
        self._error = None
        self._from_jid = None
        self._to_jid = None
        self._stanza_type = None
        self._stanza_id = None
        if isinstance(element, ElementClass):
            self._element = element
            self._dirty = False
            if element.tag.startswith("{"):
                self._namespace, self.element_name = \
                                            element.tag[1:].split("}", 1)
            else:
                self._namespace = STANZA_CLIENT_NS
                self.element_name = element.tag
            self._payload = None
            self._decode_attributes()
        else:
            self._element = None
            self._dirty = True
            self.element_name = str(element)
            self._namespace = STANZA_CLIENT_NS
            self._payload = []

        self._ns_prefix = "{{{0}}}".format(self._namespace)
        self._element_qname = self._ns_prefix + self.element_name

        if from_jid is not None:
            self.from_jid = from_jid
        if to_jid is not None:
            self.to_jid = to_jid
        if stanza_type:
            self.stanza_type = stanza_type
        if stanza_id:
            self.stanza_id = stanza_id
        elif self._element is None and self.auto_id:
            self.stanza_id = gen_id()

        if self._element is None and self.stanza_type == "error":
            if error:
                self._error = error
            elif error_cond:
                self._error = StanzaErrorElement(error_cond)

    def _decode_attributes(self):
        """Decode the common stanza attributes and the error element."""
        element = self._element
        self._from_jid = element.get("from")
        self._to_jid = element.get("to")
        self._stanza_type = element.get("type")
        self._stanza_id = element.get("id")
        if self._stanza_type == "error":
            error_el = element.find(self._ns_prefix + "error")
            if error_el is not None:
                try:
                    self._error = StanzaErrorElement(error_el)
                except ValueError as err:
                    raise StanzaDecodeError("Bad error element: {0}"
                                                    .format(err), element)

    def __repr__(self):
        return "<{0} {1!r} type={2!r} id={3!r}>".format(
                        self.__class__.__name__, self.element_name,
                        self._stanza_type, self._stanza_id)

    def copy(self):
        """Create a deep copy of the stanza.

        :Returntype: `Stanza`"""
        return self.__class__(ElementTree.XML(
                                ElementTree.tostring(self.get_xml())))

    def serialize(self):
        """Serialize the stanza into a string.

        :Returntype: `str`"""
        return serialize(self.get_xml())

    def _add_stanza_children(self, element):
        """Append the stanza-namespace children specific to the stanza class
        (like <body/> or <show/>) to `element`.

        Does nothing here, to be overriden in subclasses."""
        pass

    def as_xml(self):
        """Return the XML stanza representation.

        Always return an independent copy of the stanza XML representation,
        which can be freely modified without affecting the stanza.

        :Returntype: :etree:`ElementTree.Element`"""
        attrs = {}
        if self._from_jid:
            attrs["from"] = self._from_jid
        if self._to_jid:
            attrs["to"] = self._to_jid
        if self._stanza_type:
            attrs["type"] = self._stanza_type
        if self._stanza_id:
            attrs["id"] = self._stanza_id
        element = ElementTree.Element(self._element_qname, attrs)
        self._add_stanza_children(element)
        if self._payload is None:
            self.decode_payload()
        for payload in self._payload:
            element.append(payload.as_xml())
        if self._stanza_type == "error" and self._error:
            element.append(self._error.as_xml(
                                        stanza_namespace = self._namespace))
        return element

    def get_xml(self):
        """Return the XML stanza representation.

        This returns the original or cached XML representation, which
        may be much more efficient than `as_xml`.

        Result of this function should never be modified.

        :Returntype: :etree:`ElementTree.Element`"""
        if not self._dirty:
            return self._element
        element = self.as_xml()
        self._element = element
        self._dirty = False
        return element

    def decode_payload(self):
        """Decode payload from the element passed to the stanza constructor.

        Iterates over stanza children and creates StanzaPayload objects for
        them. For the `Stanza` class all children are payload, for subclasses
        the stanza-namespace children are not."""
        if self._payload is not None:
            return
        if self._element is None:
            raise ValueError("This stanza has no element to decode")
        payload = []
        for child in self._element:
            if self.__class__ is not Stanza:
                if child.tag.startswith(self._ns_prefix):
                    continue
            payload.append(payload_factory(child))
        self._payload = payload

    @property
    def from_jid(self):
        """Source address of the stanza."""
        return self._from_jid

    @from_jid.setter
    def from_jid(self, from_jid):
        self._from_jid = str(from_jid)
        self._dirty = True

    @property
    def to_jid(self):
        """Destination address of the stanza."""
        return self._to_jid

    @to_jid.setter
    def to_jid(self, to_jid):
        self._to_jid = str(to_jid)
        self._dirty = True

    @property
    def stanza_type(self):
        """Value of the 'type' attribute."""
        return self._stanza_type

    @stanza_type.setter
    def stanza_type(self, stanza_type):
        self._stanza_type = str(stanza_type)
        self._dirty = True

    @property
    def stanza_id(self):
        """Value of the 'id' attribute."""
        return self._stanza_id

    @stanza_id.setter
    def stanza_id(self, stanza_id):
        self._stanza_id = str(stanza_id)
        self._dirty = True

    @property
    def error(self):
        """Error element of an "error" stanza."""
        return self._error

    @error.setter
    def error(self, error):
        self._error = error
        self._dirty = True

    def mark_dirty(self):
        """Mark the stanza `dirty` so the XML representation will be
        re-built the next time it is requested."""
        self._dirty = True

    def set_payload(self, payload):
        """Set stanza payload to a single item, dropping the current payload.

        :Parameters:
            - `payload`: XML element or stanza payload object to use
        :Types:
            - `payload`: :etree:`ElementTree.Element` or `StanzaPayload`
        """
        if isinstance(payload, ElementClass):
            self._payload = [XMLPayload(payload)]
        elif isinstance(payload, StanzaPayload):
            self._payload = [payload]
        else:
            raise TypeError("Bad payload type")
        self._dirty = True

    def add_payload(self, payload):
        """Add new stanza payload.

        :Parameters:
            - `payload`: XML element or stanza payload object to add
        :Types:
            - `payload`: :etree:`ElementTree.Element` or `StanzaPayload`
        """
        if self._payload is None:
            self.decode_payload()
        if isinstance(payload, ElementClass):
            self._payload.append(XMLPayload(payload))
        elif isinstance(payload, StanzaPayload):
            self._payload.append(payload)
        else:
            raise TypeError("Bad payload type")
        self._dirty = True

    def get_all_payload(self):
        """Return list of stanza payload objects.

        :Returntype: `list` of `StanzaPayload`
        """
        if self._payload is None:
            self.decode_payload()
        return list(self._payload)

    def get_payload(self, payload_class):
        """Return the first payload item of the given class, or `None`.

        :Parameters:
            - `payload_class`: requested payload class
        :Types:
            - `payload_class`: subclass of `StanzaPayload`
        """
        for payload in self.get_all_payload():
            if isinstance(payload, payload_class):
                return payload
        return None

    def _get_child_text(self, name):
        """Return text of a stanza-namespace child of the received element."""
        if self._element is None:
            return None
        child = self._element.find(self._ns_prefix + name)
        if child is None:
            return None
        return child.text or ""

# vi: sts=4 et sw=4
