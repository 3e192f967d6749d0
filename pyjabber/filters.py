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

"""Stanza filters.

A filter decides if a stanza is interesting for a listener or a collector.
Filters keep no state changed by `matches`, so a single filter object may be
used for many listeners and collectors and called from any thread.

`None` used in place of a filter means 'match everything'.
"""

__docformat__ = "restructuredtext en"

from abc import ABCMeta, abstractmethod

class StanzaFilter(metaclass = ABCMeta):
    """Base class for stanza filters."""
    # pylint: disable=R0903
    @abstractmethod
    def matches(self, stanza):
        """Check if the stanza passes the filter.

        :Parameters:
            - `stanza`: the stanza to check
        :Types:
            - `stanza`: `Stanza`

        :Returntype: `bool`
        """
        raise NotImplementedError

    def __and__(self, other):
        return AndFilter(self, other)

    def __or__(self, other):
        return OrFilter(self, other)

    def __invert__(self):
        return NotFilter(self)

def filter_matches(stanza_filter, stanza):
    """Apply `stanza_filter` to `stanza`, treating `None` as a filter
    matching everything."""
    if stanza_filter is None:
        return True
    return stanza_filter.matches(stanza)

class StanzaIdFilter(StanzaFilter):
    """Matches stanzas with given 'id' attribute value.

    This is the filter used to match replies to requests.

    :Ivariables:
        - `stanza_id`: the id to match
    """
    def __init__(self, stanza_id):
        if not stanza_id:
            raise ValueError("Stanza id required")
        self.stanza_id = str(stanza_id)

    def matches(self, stanza):
        return stanza.stanza_id == self.stanza_id

    def __repr__(self):
        return "StanzaIdFilter({0!r})".format(self.stanza_id)

class StanzaClassFilter(StanzaFilter):
    """Matches stanzas of the given class (`Iq`, `Message`, `Presence`)."""
    def __init__(self, stanza_class):
        self.stanza_class = stanza_class

    def matches(self, stanza):
        return isinstance(stanza, self.stanza_class)

    def __repr__(self):
        return "StanzaClassFilter({0})".format(self.stanza_class.__name__)

class StanzaTypeFilter(StanzaFilter):
    """Matches stanzas with one of the given 'type' attribute values.

    `None` in `stanza_types` matches stanzas with no 'type'."""
    def __init__(self, *stanza_types):
        if not stanza_types:
            raise ValueError("At least one stanza type required")
        self.stanza_types = frozenset(stanza_types)

    def matches(self, stanza):
        return stanza.stanza_type in self.stanza_types

class FromFilter(StanzaFilter):
    """Matches stanzas sent from the given address.

    When `bare` is set, only the part before the first '/' (the resource
    separator) is compared, so all resources of the sender match.
    Comparison is case-insensitive."""
    def __init__(self, address, bare = False):
        self.bare = bare
        self.address = self._normalize(address)

    def _normalize(self, address):
        """Prepare an address for comparison."""
        if address is None:
            return None
        if self.bare:
            address = address.split("/", 1)[0]
        return address.lower()

    def matches(self, stanza):
        return self._normalize(stanza.from_jid) == self.address

    def __repr__(self):
        return "FromFilter({0!r}, bare = {1!r})".format(self.address,
                                                                self.bare)

class ThreadFilter(StanzaFilter):
    """Matches messages with the given thread id."""
    def __init__(self, thread):
        self.thread = thread

    def matches(self, stanza):
        return getattr(stanza, "thread", None) == self.thread

class PayloadFilter(StanzaFilter):
    """Matches stanzas with a child element of the given qualified name, e.g.
    ``"{jabber:iq:auth}query"``, or with a child in the given namespace, when
    only ``"{namespace}"`` is given."""
    def __init__(self, qname):
        if not qname.startswith("{"):
            raise ValueError("Namespace-qualified name required")
        self.qname = qname

    def matches(self, stanza):
        for child in stanza.get_xml():
            if child.tag == self.qname:
                return True
            if self.qname.endswith("}") and child.tag.startswith(self.qname):
                return True
        return False

class FunctionFilter(StanzaFilter):
    """Wraps a plain predicate function as a filter."""
    def __init__(self, function):
        self.function = function

    def matches(self, stanza):
        return bool(self.function(stanza))

class AndFilter(StanzaFilter):
    """Matches stanzas passing all the sub-filters."""
    def __init__(self, *filters):
        self.filters = tuple(filters)

    def matches(self, stanza):
        for stanza_filter in self.filters:
            if not filter_matches(stanza_filter, stanza):
                return False
        return True

class OrFilter(StanzaFilter):
    """Matches stanzas passing any of the sub-filters."""
    def __init__(self, *filters):
        self.filters = tuple(filters)

    def matches(self, stanza):
        for stanza_filter in self.filters:
            if filter_matches(stanza_filter, stanza):
                return True
        return False

class NotFilter(StanzaFilter):
    """Negation of another filter."""
    def __init__(self, stanza_filter):
        self.stanza_filter = stanza_filter

    def matches(self, stanza):
        return not filter_matches(self.stanza_filter, stanza)

# vi: sts=4 et sw=4
