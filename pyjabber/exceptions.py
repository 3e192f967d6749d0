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

"""PyJabber exceptions.

Four kinds of failure are distinguished:

    - I/O and connection failures (`JabberIOError`), fatal for the session,
    - stream decoding problems (`StreamParseError`, `StanzaDecodeError`),
      handled inside the stanza reader and only logged,
    - authentication failures (`AuthenticationError`),
    - API misuse (`UsageError`).
"""

__docformat__ = "restructuredtext en"

import logging

class PyJabberError(Exception):
    """Base class for all PyJabber exceptions."""
    pass

class JabberIOError(PyJabberError):
    """Connection or transport-level I/O failure.

    Raised when the server cannot be reached, when a read or write on an
    established connection fails and when the server does not open its
    stream in time. There is no automatic retry."""
    pass

class DNSError(JabberIOError):
    """Server name could not be resolved."""
    pass

class StreamParseError(PyJabberError):
    """The incoming byte stream is not well-formed XML.

    The stream cannot be recovered after that and the stanza reader
    stops."""
    pass

class StanzaDecodeError(PyJabberError):
    """A well-formed element received on the stream is not a valid stanza.

    :Ivariables:
        - `element`: the offending element (may be `None`)
    """
    logger = logging.getLogger("pyjabber.StanzaDecodeError")
    def __init__(self, message, element = None):
        PyJabberError.__init__(self, message)
        self.element = element

    def log_ignored(self):
        """Log information about the dropped stanza."""
        self.logger.warning("Dropping malformed stanza: {0}".format(self))

class AuthenticationError(PyJabberError):
    """Login failure.

    :Ivariables:
        - `reason`: human-readable description
        - `code`: error code provided by the server, if any
        - `text`: error text provided by the server, if any
    """
    def __init__(self, reason, code = None, text = None):
        PyJabberError.__init__(self, reason)
        self.reason = reason
        self.code = code
        self.text = text

class UsageError(PyJabberError, RuntimeError):
    """Operation not allowed in the current session state."""
    pass

class NotConnectedError(UsageError):
    """The session is not connected."""
    def __init__(self, message = "Not connected to server."):
        UsageError.__init__(self, message)

class AlreadyAuthenticatedError(UsageError):
    """`login()` called a second time on the same session, whatever the
    result of the first call."""
    def __init__(self, message = "login() already called on this session."):
        UsageError.__init__(self, message)

# vi: sts=4 et sw=4
