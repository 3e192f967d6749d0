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

"""Legacy (non-SASL) Jabber authentication.

The authentication is done in two request-reply rounds:

    1. An <iq type='get'/> with the user name only. The server replies with
       an empty query listing the accepted credentials: <digest/> and/or
       <password/>.
    2. An <iq type='set'/> with the user name, the resource and the digest
       (preferred) or the plain-text password.

After successful authentication the 'available' presence is sent.

Normative reference:
  - `XEP-0078 <http://xmpp.org/extensions/xep-0078.html>`__
"""

__docformat__ = "restructuredtext en"

import hashlib
import logging

from .etree import ElementTree
from .constants import IQ_AUTH_QNP
from .exceptions import AuthenticationError
from .filters import StanzaIdFilter
from .iq import Iq
from .presence import Presence
from .settings import XMPPSettings
from .stanzapayload import StanzaPayload, payload_element_name

logger = logging.getLogger("pyjabber.auth")

NO_RESPONSE = "No response from the server."
UNSUPPORTED_MECHANISM = ("Server does not support compatible authentication"
                                                                " mechanism.")
AUTH_FAILED = "Authentication failed."

def make_digest(stream_id, password):
    """Compute the digest credential: hex SHA-1 of the stream id followed by
    the password.

    :Parameters:
        - `stream_id`: the stream id assigned by the server
        - `password`: the password
    :Types:
        - `stream_id`: `str`
        - `password`: `str`

    :Returntype: `str`
    """
    data = (stream_id + password).encode("utf-8")
    return hashlib.sha1(data).hexdigest()

@payload_element_name(IQ_AUTH_QNP + "query")
class AuthQuery(StanzaPayload):
    """The 'jabber:iq:auth' query.

    For the fields used as capability flags in a server reply an empty
    string means 'present, but empty' and `None` means 'absent'.

    :Ivariables:
        - `username`: the user name
        - `resource`: the resource
        - `password`: the plain-text password
        - `digest`: the digest credential
    :Types:
        - `username`: `str`
        - `resource`: `str`
        - `password`: `str`
        - `digest`: `str`
    """
    # pylint: disable=W0231
    fields = ("username", "password", "digest", "resource")
    def __init__(self, element = None, username = None, resource = None,
                                            password = None, digest = None):
        self.username = username
        self.resource = resource
        self.password = password
        self.digest = digest
        if element is not None:
            for name in self.fields:
                child = element.find(IQ_AUTH_QNP + name)
                if child is not None:
                    setattr(self, name, child.text or "")

    def as_xml(self):
        element = ElementTree.Element(IQ_AUTH_QNP + "query")
        for name in self.fields:
            value = getattr(self, name)
            if value is not None:
                ElementTree.SubElement(element, IQ_AUTH_QNP + name).text = \
                                                                value or None
        return element

    def __repr__(self):
        fields = ["{0}={1!r}".format(name, getattr(self, name))
                    for name in ("username", "resource")
                                                if getattr(self, name)]
        for name in ("password", "digest"):
            if getattr(self, name) is not None:
                fields.append(name)
        return "<AuthQuery {0}>".format(" ".join(fields))

class LegacyAuthenticator(object):
    """Legacy authentication state machine.

    States: "idle" -> "awaiting-discovery" -> "awaiting-auth" ->
    "authenticated", or "failed" from either of the awaiting states.

    :Ivariables:
        - `reader`: the stanza reader, used to create the reply collectors
        - `writer`: the stanza writer
        - `stream_id`: the stream id (the digest salt)
        - `settings`: the settings (`reply_timeout` is used)
        - `state`: the current state
        - `failure`: the `AuthenticationError` in the "failed" state
    :Types:
        - `reader`: `pyjabber.reader.StanzaReader`
        - `writer`: `pyjabber.writer.StanzaWriter`
        - `stream_id`: `str`
        - `settings`: `XMPPSettings`
        - `state`: `str`
        - `failure`: `AuthenticationError`
    """
    def __init__(self, reader, writer, stream_id, settings = None):
        self.reader = reader
        self.writer = writer
        self.stream_id = stream_id
        self.settings = settings if settings is not None else XMPPSettings()
        self.state = "idle"
        self.failure = None

    def _fail(self, reason, code = None, text = None):
        """Switch to the "failed" state and raise the error."""
        logger.debug("Authentication failed in state {0!r}: {1}"
                                                .format(self.state, reason))
        self.state = "failed"
        self.failure = AuthenticationError(reason, code, text)
        raise self.failure

    def _request(self, stanza):
        """Send a request and wait for the reply.

        The collector is registered before the request is sent, so an
        immediate reply cannot be missed.

        :Return: the reply or `None` on timeout.
        :Returntype: `Iq`
        """
        timeout = self.settings["reply_timeout"]
        with self.reader.create_collector(StanzaIdFilter(stanza.stanza_id)) \
                                                                as collector:
            self.writer.send_stanza(stanza)
            return collector.next_result(timeout)

    def authenticate(self, username, password, resource):
        """Run the authentication.

        :Parameters:
            - `username`: the user name (node part of the JID)
            - `password`: the password
            - `resource`: the resource to bind
        :Types:
            - `username`: `str`
            - `password`: `str`
            - `resource`: `str`

        :Raise `AuthenticationError`: on failure.
        :Raise `JabberIOError`: when a request cannot be sent.
        """
        if self.state != "idle":
            raise RuntimeError("Authentication already started")

        self.state = "awaiting-discovery"
        request = Iq(stanza_type = "get")
        request.set_payload(AuthQuery(username = username))
        reply = self._request(request)
        if reply is None or reply.stanza_type == "error":
            self._fail(NO_RESPONSE)
        mechanisms = reply.get_payload(AuthQuery)
        if mechanisms is None:
            mechanisms = AuthQuery()

        query = AuthQuery(username = username, resource = resource)
        if mechanisms.digest is not None and self.stream_id:
            logger.debug("Using digest authentication")
            query.digest = make_digest(self.stream_id, password)
        elif mechanisms.password is not None:
            logger.debug("Using plain-text authentication")
            query.password = password
        else:
            self._fail(UNSUPPORTED_MECHANISM)

        self.state = "awaiting-auth"
        request = Iq(stanza_type = "set")
        request.set_payload(query)
        reply = self._request(request)
        if reply is None:
            self._fail(AUTH_FAILED)
        if reply.stanza_type == "error":
            error = reply.error
            if error is None:
                self._fail(AUTH_FAILED)
            text = error.text
            reason = "Authentication failed -- {0}".format(error.code)
            if text:
                reason += ": " + text
            self._fail(reason, error.code, text)

        self.state = "authenticated"
        logger.debug("Authenticated as {0!r}, resource {1!r}"
                                                .format(username, resource))
        self.writer.send_stanza(Presence(stanza_type = "available"))

XMPPSettings.add_setting("default_resource", type = str, default = "pyjabber",
        doc = """Resource used by `Session.login` when none is given."""
    )

# vi: sts=4 et sw=4
