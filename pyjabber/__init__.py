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

"""
PyJabber - Jabber client session core
=====================================

PyJabber connects to a Jabber server, logs in with the legacy
('jabber:iq:auth') authentication and lets the application send stanzas,
listen for incoming stanzas and wait synchronously for replies to its
requests.

Stanzas
-------

The three kinds of stanzas are represented by `message.Message`, `iq.Iq`
and `presence.Presence`, all based on `stanza.Stanza`. Their payload is
kept as `stanzapayload.XMLPayload` objects or specialized
`stanzapayload.StanzaPayload` subclasses, like `auth.AuthQuery`.

Session
-------

`session.Session` is the entry point. It owns the transport
(`transport.SocketTransport`) and its two halves:

  - `reader.StanzaReader` -- a thread parsing the incoming stream and
    dispatching stanzas to the listeners and collectors,
  - `writer.StanzaWriter` -- serializing and writing the outgoing stanzas.

Waiting for replies
-------------------

A `collector.StanzaCollector` buffers the incoming stanzas passing
a `filters.StanzaFilter` and lets a thread block until one arrives:

    request = Iq(to_jid = "example.com", stanza_type = "get")
    request.set_payload(query)
    with session.create_collector(StanzaIdFilter(request.stanza_id)) as coll:
        session.send_stanza(request)
        reply = coll.next_result(5)

Configuration
-------------

Optional parameters are passed in a `settings.XMPPSettings` object.

Debugging
---------

All modules log through the standard `logging` module, to loggers named
'pyjabber.<module>'. The raw traffic can be observed with
a `debug.StreamObserver` passed to the `session.Session`; the
`debug.LoggingObserver` logs it to 'pyjabber.debug.in' and
'pyjabber.debug.out'.
"""

__docformat__ = "restructuredtext en"

# vi: sts=4 et sw=4
