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

"""Stanza error handling.

Both the legacy Jabber error format (numeric 'code' attribute and the
description as the element text) and the RFC 6120 format (condition element
and optional <text/>) are understood. Servers speaking the legacy
'jabber:iq:auth' protocol often send both at once.

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
  - `XEP-0086 <http://xmpp.org/extensions/xep-0086.html>`__
"""

__docformat__ = "restructuredtext en"

import logging
from copy import deepcopy

from .etree import ElementTree, ElementClass
from .constants import STANZA_ERROR_QNP, STANZA_CLIENT_QNP
from .constants import STANZA_NAMESPACES, XML_LANG_QNAME
from .xmppserializer import serialize

logger = logging.getLogger("pyjabber.error")

# condition name: (default message, error type, legacy code)
STANZA_ERRORS = {
            "bad-request":
                ("Bad request", "modify", "400"),
            "conflict":
                ("Named session or resource already exists", "cancel", "409"),
            "feature-not-implemented":
                ("Feature requested is not implemented", "cancel", "501"),
            "forbidden":
                ("You are forbidden to perform requested action", "auth",
                                                                        "403"),
            "gone":
                ("Recipient or server can no longer be contacted"
                                        " at this address", "modify", "302"),
            "internal-server-error":
                ("Internal server error", "wait", "500"),
            "item-not-found":
                ("Item not found", "cancel", "404"),
            "jid-malformed":
                ("JID malformed", "modify", "400"),
            "not-acceptable":
                ("Requested action is not acceptable", "modify", "406"),
            "not-allowed":
                ("Requested action is not allowed", "cancel", "405"),
            "not-authorized":
                ("Not authorized", "auth", "401"),
            "recipient-unavailable":
                ("Recipient is not available", "wait", "404"),
            "redirect":
                ("Redirection", "modify", "302"),
            "registration-required":
                ("Registration required", "auth", "407"),
            "remote-server-not-found":
                ("Remote server not found", "cancel", "404"),
            "remote-server-timeout":
                ("Remote server timeout", "wait", "504"),
            "resource-constraint":
                ("Resource constraint", "wait", "500"),
            "service-unavailable":
                ("Service is not available", "cancel", "503"),
            "subscription-required":
                ("Subscription is required", "auth", "407"),
            "undefined-condition":
                ("Unknown error", "cancel", "500"),
            "unexpected-request":
                ("Unexpected request", "wait", "400"),
    }

# legacy code: condition name, for errors without a condition element
LEGACY_CODES = {
            "302": "redirect",
            "400": "bad-request",
            "401": "not-authorized",
            "403": "forbidden",
            "404": "item-not-found",
            "405": "not-allowed",
            "406": "not-acceptable",
            "407": "registration-required",
            "408": "remote-server-timeout",
            "409": "conflict",
            "500": "internal-server-error",
            "501": "feature-not-implemented",
            "502": "service-unavailable",
            "503": "service-unavailable",
            "504": "remote-server-timeout",
    }

class StanzaErrorElement(object):
    """Stanza error element.

    :Ivariables:
        - `condition`: the condition element
        - `code`: legacy numeric error code
        - `text`: human-readable error description
        - `error_type`: 'type' of the error, one of: 'auth', 'cancel',
          'continue', 'modify', 'wait'
        - `language`: xml:lang of the error description
        - `custom_condition`: application-specific condition elements
    :Types:
        - `condition`: :etree:`ElementTree.Element`
        - `code`: `str`
        - `text`: `str`
        - `error_type`: `str`
        - `language`: `str`
        - `custom_condition`: `list` of :etree:`ElementTree.Element`
    """
    error_qname = STANZA_CLIENT_QNP + "error"
    text_qname = STANZA_ERROR_QNP + "text"
    cond_qname_prefix = STANZA_ERROR_QNP
    def __init__(self, element_or_cond, text = None, language = None,
                                            error_type = None, code = None):
        """Initialize a StanzaErrorElement object.

        :Parameters:
            - `element_or_cond`: XML <error/> element to decode or an error
              condition name.
            - `text`: optional description
            - `language`: RFC 3066 language tag for the description
            - `error_type`: 'type' of the error
            - `code`: legacy error code; derived from the condition if not
              given
        :Types:
            - `element_or_cond`: :etree:`ElementTree.Element` or `str`
            - `text`: `str`
            - `language`: `str`
            - `error_type`: `str`
            - `code`: `str`
        """
        self.text = None
        self.code = None
        self.error_type = None
        self.custom_condition = []
        self.language = language
        if isinstance(element_or_cond, str):
            if element_or_cond not in STANZA_ERRORS:
                raise ValueError("Bad error condition")
            self.condition = ElementTree.Element(self.cond_qname_prefix
                                                        + element_or_cond)
        elif isinstance(element_or_cond, ElementClass):
            self._from_xml(element_or_cond)
        else:
            raise TypeError("Element or string expected")
        if text:
            self.text = text
        if code:
            self.code = str(code)
        if error_type:
            self.error_type = error_type
        defaults = STANZA_ERRORS.get(self.condition_name,
                                        STANZA_ERRORS["undefined-condition"])
        if not self.error_type:
            self.error_type = defaults[1]
        if not self.code:
            self.code = defaults[2]

    def _from_xml(self, element):
        """Initialize the object from an XML <error/> element."""
        if not element.tag.endswith("}error"):
            raise ValueError("{0!r} is not an error element".format(element))
        namespace = element.tag[1:].split("}", 1)[0]
        if namespace not in STANZA_NAMESPACES:
            raise ValueError("Bad error namespace {0!r}".format(namespace))
        self.error_qname = element.tag
        lang = element.get(XML_LANG_QNAME)
        if lang:
            self.language = lang
        self.code = element.get("code")
        self.error_type = element.get("type")
        self.condition = None
        for child in element:
            if child.tag == self.text_qname:
                lang = child.get(XML_LANG_QNAME)
                if lang:
                    self.language = lang
                if child.text:
                    self.text = child.text.strip()
            elif child.tag.startswith(self.cond_qname_prefix):
                if self.condition is not None:
                    logger.warning("Multiple conditions in error element.")
                    continue
                self.condition = deepcopy(child)
            else:
                self.custom_condition.append(deepcopy(child))
        if self.condition is None:
            cond_name = LEGACY_CODES.get(self.code, "undefined-condition")
            self.condition = ElementTree.Element(self.cond_qname_prefix
                                                                + cond_name)
        if not self.text and element.text and element.text.strip():
            # legacy format: description as the element content
            self.text = element.text.strip()

    @property
    def condition_name(self):
        """The condition name (condition element name without the
        namespace)."""
        return self.condition.tag.split("}", 1)[1]

    def get_message(self):
        """Get the error description: the text provided by the peer or
        the standard English message for the condition.

        :Returntype: `str`
        """
        if self.text:
            return self.text
        cond = self.condition_name
        if cond in STANZA_ERRORS:
            return STANZA_ERRORS[cond][0]
        return None

    def add_custom_condition(self, element):
        """Add an application-specific condition element to the error."""
        self.custom_condition.append(element)

    def as_xml(self, stanza_namespace = None):
        """Return the XML error representation, in both formats.

        :Parameters:
            - `stanza_namespace`: namespace URI of the containing stanza
        :Types:
            - `stanza_namespace`: `str`

        :Returntype: :etree:`ElementTree.Element`"""
        if stanza_namespace:
            qname = "{{{0}}}error".format(stanza_namespace)
        else:
            qname = self.error_qname
        result = ElementTree.Element(qname)
        result.set("type", self.error_type)
        if self.code:
            result.set("code", self.code)
        result.append(deepcopy(self.condition))
        for element in self.custom_condition:
            result.append(deepcopy(element))
        if self.text:
            text = ElementTree.SubElement(result, self.text_qname)
            if self.language:
                text.set(XML_LANG_QNAME, self.language)
            text.text = self.text
        return result

    def serialize(self):
        """Serialize the error element.

        :Returntype: `str`"""
        return serialize(self.as_xml())

# vi: sts=4 et sw=4
