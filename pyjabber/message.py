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

"""Message Jabber stanza handling

Normative reference:
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

from .etree import ElementTree, ElementClass
from .stanza import Stanza

MESSAGE_TYPES = ("normal", "chat", "headline", "error", "groupchat")

class Message(Stanza):
    """<message /> stanza class.

    :Ivariables:
        - `subject`: the <subject/> element value
        - `body`: the <body/> element value
        - `thread`: the <thread/> element value
    """
    # pylint: disable=R0902,R0904
    element_name = "message"
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            error = None, error_cond = None,
                            subject = None, body = None, thread = None):
        """Initialize a `Message` object.

        :Parameters:
            - `element`: XML element of this stanza.
            - `from_jid`: sender address.
            - `to_jid`: recipient address.
            - `stanza_type`: staza type: one of: "normal", "chat",
              "headline", "error", "groupchat"
            - `stanza_id`: stanza id -- value of stanza's "id" attribute
            - `error`: error object. Ignored if `stanza_type` is not "error".
            - `error_cond`: error condition name. Ignored if `stanza_type` is
              not "error".
            - `subject`: message subject,
            - `body`: message body.
            - `thread`: message thread id.
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `str`
            - `to_jid`: `str`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `error`: `StanzaErrorElement`
            - `error_cond`: `str`
            - `subject`: `str`
            - `body`: `str`
            - `thread`: `str`
        """
        # pylint: disable=R0913
        self._subject = None
        self._body = None
        self._thread = None
        if element is None:
            element = "message"
            if stanza_type and stanza_type not in MESSAGE_TYPES:
                raise ValueError("Invalid message type: {0!r}"
                                                        .format(stanza_type))
        elif not isinstance(element, ElementClass):
            raise TypeError("Couldn't make Message from " + repr(element))

        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id,
                        error = error, error_cond = error_cond)

        if self._element is not None:
            self._subject = self._get_child_text("subject")
            self._body = self._get_child_text("body")
            self._thread = self._get_child_text("thread")
        if subject is not None:
            self.subject = subject
        if body is not None:
            self.body = body
        if thread is not None:
            self.thread = thread

    def _add_stanza_children(self, element):
        ns_prefix = self._ns_prefix
        for name in ("subject", "body", "thread"):
            value = getattr(self, "_" + name)
            if value is not None:
                ElementTree.SubElement(element, ns_prefix + name).text = value

    @property
    def subject(self):
        """Message subject."""
        return self._subject

    @subject.setter
    def subject(self, subject):
        self._subject = subject
        self._dirty = True

    @property
    def body(self):
        """Message body."""
        return self._body

    @body.setter
    def body(self, body):
        self._body = body
        self._dirty = True

    @property
    def thread(self):
        """Message thread id."""
        return self._thread

    @thread.setter
    def thread(self, thread):
        self._thread = thread
        self._dirty = True

    def make_error_response(self, cond):
        """Create error response for any non-error message stanza.

        :Parameters:
            - `cond`: error condition name, as defined in XMPP specification.

        :return: new message stanza with the same "id" as self, "from" and
            "to" attributes swapped, type="error" and containing <error />
            element plus payload of `self`.
        :returntype: `Message`"""
        if self.stanza_type == "error":
            raise ValueError("Errors may not be generated in response"
                                                                " to errors")
        msg = Message(stanza_type = "error", from_jid = self.to_jid,
                        to_jid = self.from_jid, stanza_id = self.stanza_id,
                        error_cond = cond,
                        subject = self._subject, body = self._body,
                        thread = self._thread)
        for payload in self.get_all_payload():
            msg.add_payload(payload.copy())
        return msg

# vi: sts=4 et sw=4
