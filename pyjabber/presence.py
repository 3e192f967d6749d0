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

"""Presence Jabber stanza handling

Presence semantics are not interpreted here, the stanzas are only built and
passed through.

Normative reference:
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

from .etree import ElementTree, ElementClass
from .stanza import Stanza

PRESENCE_TYPES = ("available", "unavailable", "probe",
                    "subscribe", "unsubscribe", "subscribed", "unsubscribed",
                    "invisible", "error")

class Presence(Stanza):
    """<presence /> stanza.

    :Ivariables:
        - `show`: the <show/> element value
        - `status`: the <status/> element value
        - `priority`: presence priority
    """
    # pylint: disable=R0902,R0904
    element_name = "presence"
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            error = None, error_cond = None,
                            show = None, status = None, priority = 0):
        """Initialize a `Presence` object.

        :Parameters:
            - `element`: XML element
            - `from_jid`: sender address.
            - `to_jid`: recipient address.
            - `stanza_type`: staza type: one of: None, "available",
              "unavailable", "subscribe", "subscribed", "unsubscribe",
              "unsubscribed" or "error". "available" is automaticaly changed
              to None.
            - `stanza_id`: stanza id -- value of stanza's "id" attribute
            - `error`: error object. Ignored if `stanza_type` is not "error".
            - `error_cond`: error condition name. Ignored if `stanza_type` is
              not "error"
            - `show`: "show" field of presence stanza. One of: None, "away",
              "xa", "dnd", "chat".
            - `status`: descriptive text for the presence stanza.
            - `priority`: presence priority.
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `str`
            - `to_jid`: `str`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `error`: `StanzaErrorElement`
            - `error_cond`: `str`
            - `show`: `str`
            - `status`: `str`
            - `priority`: `int`
        """
        # pylint: disable=R0913
        self._show = None
        self._status = None
        self._priority = 0
        if element is None:
            element = "presence"
            if stanza_type and stanza_type not in PRESENCE_TYPES:
                raise ValueError("Invalid presence type: {0!r}"
                                                        .format(stanza_type))
        elif not isinstance(element, ElementClass):
            raise TypeError("Couldn't make Presence from " + repr(element))

        if stanza_type == "available":
            stanza_type = None

        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id,
                        error = error, error_cond = error_cond)

        if self._element is not None:
            self._show = self._get_child_text("show")
            self._status = self._get_child_text("status")
            prio_text = self._get_child_text("priority")
            if prio_text:
                try:
                    self._priority = int(prio_text.strip())
                except ValueError:
                    self._priority = 0
        if show:
            self.show = show
        if status:
            self.status = status
        if priority:
            self.priority = priority

    def _add_stanza_children(self, element):
        ns_prefix = self._ns_prefix
        if self._show:
            ElementTree.SubElement(element, ns_prefix + "show").text = \
                                                                    self._show
        if self._status:
            ElementTree.SubElement(element, ns_prefix + "status").text = \
                                                                self._status
        if self._priority:
            ElementTree.SubElement(element, ns_prefix + "priority").text = \
                                                        str(self._priority)

    @property
    def show(self):
        """Presence status type."""
        return self._show

    @show.setter
    def show(self, show):
        self._show = str(show) if show else None
        self._dirty = True

    @property
    def status(self):
        """Presence status message."""
        return self._status

    @status.setter
    def status(self, status):
        self._status = str(status) if status else None
        self._dirty = True

    @property
    def priority(self):
        """Presence priority."""
        return self._priority

    @priority.setter
    def priority(self, priority):
        priority = int(priority)
        if priority < -128 or priority > 127:
            raise ValueError("Priority must be in the (-128, 128) range")
        self._priority = priority
        self._dirty = True

# vi: sts=4 et sw=4
