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

"""Iq Jabber stanza handling

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

from .etree import ElementClass
from .exceptions import StanzaDecodeError
from .stanza import Stanza

IQ_TYPES = ("get", "set", "result", "error")

class Iq(Stanza):
    """<iq /> stanza class.

    New <iq/> stanzas get a unique `stanza_id` unless one is given, so
    the reply can be matched to the request."""
    # pylint: disable=R0904
    element_name = "iq"
    auto_id = True
    def __init__(self, element = None, from_jid = None, to_jid = None,
                        stanza_type = None, stanza_id = None,
                        error = None, error_cond = None):
        """Initialize an `Iq` object.

        :Parameters:
            - `element`: XML element of this stanza.
            - `from_jid`: sender address.
            - `to_jid`: recipient address.
            - `stanza_type`: staza type: one of: "get", "set", "result"
              or "error".
            - `stanza_id`: stanza id -- value of stanza's "id" attribute. If
              not given, then unique for the session value is generated.
            - `error`: error object. Ignored if `stanza_type` is not "error".
            - `error_cond`: error condition name. Ignored if `stanza_type` is
              not "error" or `error` is not None.
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `str`
            - `to_jid`: `str`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `error`: `StanzaErrorElement`
            - `error_cond`: `str`
        """
        # pylint: disable=R0913
        if element is None:
            element = "iq"
            if stanza_type not in IQ_TYPES:
                raise ValueError("Invalid Iq type: {0!r}".format(stanza_type))
        elif not isinstance(element, ElementClass):
            raise TypeError("Couldn't make Iq from " + repr(element))
        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id,
                        error = error, error_cond = error_cond)
        if self._stanza_type not in IQ_TYPES:
            raise StanzaDecodeError("Invalid Iq type: {0!r}".format(
                                            self._stanza_type), self._element)

    def make_error_response(self, cond):
        """Create error response for the a "get" or "set" iq stanza.

        :Parameters:
            - `cond`: error condition name, as defined in XMPP specification.

        :Return: new `Iq` object with the same "id" as self, "from" and "to"
            attributes swapped, type="error" and containing <error /> element
            plus payload of `self`.
        :Returntype: `Iq`
        """
        if self.stanza_type not in ("set", "get"):
            raise ValueError("Errors may only be generated for"
                                                    " 'set' or 'get' iq")
        stanza = Iq(stanza_type = "error", from_jid = self.to_jid,
                        to_jid = self.from_jid, stanza_id = self.stanza_id,
                        error_cond = cond)
        if self._payload is None:
            self.decode_payload()
        for payload in self._payload:
            stanza.add_payload(payload.copy())
        return stanza

    def make_result_response(self):
        """Create result response for the a "get" or "set" iq stanza.

        :Return: new `Iq` object with the same "id" as self, "from" and "to"
            attributes replaced and type="result".
        :Returntype: `Iq`"""
        if self.stanza_type not in ("set", "get"):
            raise ValueError("Results may only be generated for"
                                                    " 'set' or 'get' iq")
        return Iq(stanza_type = "result", from_jid = self.to_jid,
                        to_jid = self.from_jid, stanza_id = self.stanza_id)

# vi: sts=4 et sw=4
