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

"""ElementTree API selection.

The rest of the PyJabber package imports the ElementTree API from this
module, so an alternative, API-compatible implementation may be plugged in
by setting the 'PYJABBER_ETREE' environment variable, e.g.:

    $ PYJABBER_ETREE="lxml.etree" python myclient.py

By default the standard Python ElementTree implementation is used
(`xml.etree.ElementTree`). Any replacement must provide `XMLPullParser`.
"""

__docformat__ = "restructuredtext en"

import os
from abc import ABCMeta

if "PYJABBER_ETREE" in os.environ:
    ElementTree = __import__(os.environ["PYJABBER_ETREE"], fromlist=[""])
else:
    from xml.etree import ElementTree

class ElementClass(metaclass = ABCMeta):
    """Abstract class matching any element object of the selected API."""
    # pylint: disable=R0903
    element_type = type(ElementTree.Element("x"))
    @classmethod
    def __subclasshook__(cls, other):
        if cls is ElementClass:
            return other is cls.element_type or hasattr(other, "tag")
        return NotImplemented

# vi: sts=4 et sw=4
