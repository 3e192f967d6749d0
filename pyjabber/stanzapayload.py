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

"""Stanza payload classes."""

__docformat__ = "restructuredtext en"

import logging
from abc import ABCMeta
from copy import deepcopy

from .etree import ElementClass

STANZA_PAYLOAD_CLASSES = {}

logger = logging.getLogger("pyjabber.stanzapayload")

class StanzaPayload(metaclass = ABCMeta):
    """Abstract base class for stanza payload objects."""

    def __init__(self, data):
        raise NotImplementedError

    def as_xml(self):
        """Return the XML representation of the payload.

        :Returntype: :etree:`ElementTree.Element`
        """
        raise NotImplementedError

    def copy(self):
        """Return a deep copy of the payload."""
        return deepcopy(self)

class XMLPayload(StanzaPayload):
    """Transparent XML payload for stanza.

    This object can be used for any stanza payload. It doesn't decode the
    XML element, but keeps it in the ElementTree format.

    :Ivariables:
        - `xml_element_name`: qname of the payload element
        - `element`: the payload element
    """
    # pylint: disable=W0231
    def __init__(self, data):
        if isinstance(data, StanzaPayload):
            data = data.as_xml()
        if not isinstance(data, ElementClass):
            raise TypeError("ElementTree.Element required")
        self.xml_element_name = data.tag
        self.element = data

    def as_xml(self):
        return self.element

    def __repr__(self):
        return "<XMLPayload {0!r}>".format(self.xml_element_name)

def payload_element_name(element_name):
    """Class decorator generator for `StanzaPayload` subclasses.

    Registers the class as the decoder for `element_name` elements.

    :Parameters:
        - `element_name`: XML element qname handled by the class
    :Types:
        - `element_name`: `str`
    """
    def decorator(klass):
        """The decorator."""
        klass.xml_element_name = element_name
        if element_name in STANZA_PAYLOAD_CLASSES:
            logger.warning("Overriding payload class for {0!r}".format(
                                                                element_name))
        STANZA_PAYLOAD_CLASSES[element_name] = klass
        return klass
    return decorator

def payload_factory(element):
    """Decode a stanza child element into the registered payload object,
    or `XMLPayload` if no class is registered for its name."""
    klass = STANZA_PAYLOAD_CLASSES.get(element.tag, XMLPayload)
    return klass(element)

# vi: sts=4 et sw=4
