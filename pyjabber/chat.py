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

"""Chat convenience wrappers: one-to-one chats and group chat rooms."""

__docformat__ = "restructuredtext en"

from .filters import ThreadFilter, StanzaClassFilter, StanzaTypeFilter
from .filters import FromFilter
from .message import Message
from .presence import Presence
from .stanza import gen_id

class Chat(object):
    """A conversation with a single participant, identified by a message
    thread id.

    :Ivariables:
        - `session`: the session
        - `participant`: the peer address
        - `thread`: the thread id
        - `collector`: collector of the messages in the thread
    """
    def __init__(self, session, participant, thread = None):
        self.session = session
        self.participant = participant
        self.thread = thread if thread else gen_id()
        self.collector = session.create_collector(
                    StanzaClassFilter(Message) & ThreadFilter(self.thread))

    def __repr__(self):
        return "<Chat with {0!r} thread={1!r}>".format(self.participant,
                                                                self.thread)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def create_message(self, body = None):
        """Create a 'chat' message to the participant in this thread.

        :Returntype: `Message`"""
        return Message(to_jid = self.participant, stanza_type = "chat",
                                            thread = self.thread, body = body)

    def send_message(self, message):
        """Send a message in the chat.

        :Parameters:
            - `message`: the message text or a message stanza. The stanza
              gets the participant address, 'chat' type and the thread id.
        :Types:
            - `message`: `str` or `Message`
        """
        if isinstance(message, Message):
            message.to_jid = self.participant
            message.stanza_type = "chat"
            message.thread = self.thread
        else:
            message = self.create_message(message)
        self.session.send_stanza(message)

    def poll_message(self):
        """Return the next received message of the chat, if available.

        :Returntype: `Message`"""
        return self.collector.poll_result()

    def next_message(self, timeout = None):
        """Wait for the next message of the chat.

        :Return: the message or `None` on timeout.
        :Returntype: `Message`"""
        return self.collector.next_result(timeout)

    def close(self):
        """Stop collecting the chat messages."""
        self.collector.cancel()

class GroupChat(object):
    """A conversation in a multi-user chat room.

    The room is entered with `join` and left with `leave` (or `close`).
    Messages are sent to the room address with the 'groupchat' type; all
    'groupchat' messages from the room (from any occupant) are collected.

    :Ivariables:
        - `session`: the session
        - `room`: the room address, e.g. "room@conference.example.com"
        - `nickname`: the nickname used in the room, `None` before `join`
        - `collector`: collector of the room messages
    """
    def __init__(self, session, room):
        self.session = session
        self.room = room
        self.nickname = None
        self.collector = session.create_collector(
                    StanzaClassFilter(Message)
                    & StanzaTypeFilter("groupchat")
                    & FromFilter(room, bare = True))

    def __repr__(self):
        return "<GroupChat {0!r} nickname={1!r}>".format(self.room,
                                                            self.nickname)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def join(self, nickname):
        """Enter the room, sending presence to room/nickname."""
        self.nickname = nickname
        self.session.send_stanza(Presence(to_jid = self.occupant_jid))

    def leave(self):
        """Leave the room, if joined."""
        if self.nickname is None:
            return
        self.session.send_stanza(Presence(to_jid = self.occupant_jid,
                                                stanza_type = "unavailable"))
        self.nickname = None

    @property
    def occupant_jid(self):
        """Our address in the room, `None` when not joined."""
        if self.nickname is None:
            return None
        return "{0}/{1}".format(self.room, self.nickname)

    def create_message(self, body = None):
        """Create a 'groupchat' message to the room.

        :Returntype: `Message`"""
        return Message(to_jid = self.room, stanza_type = "groupchat",
                                                                body = body)

    def send_message(self, message):
        """Send a message to the room.

        :Parameters:
            - `message`: the message text or a message stanza. The stanza
              gets the room address and the 'groupchat' type.
        :Types:
            - `message`: `str` or `Message`
        """
        if isinstance(message, Message):
            message.to_jid = self.room
            message.stanza_type = "groupchat"
        else:
            message = self.create_message(message)
        self.session.send_stanza(message)

    def poll_message(self):
        """Return the next received room message, if available.

        :Returntype: `Message`"""
        return self.collector.poll_result()

    def next_message(self, timeout = None):
        """Wait for the next room message.

        :Return: the message or `None` on timeout.
        :Returntype: `Message`"""
        return self.collector.next_result(timeout)

    def close(self):
        """Leave the room and stop collecting its messages.

        The collector is cancelled even if leaving fails."""
        try:
            if self.session.is_connected():
                self.leave()
        finally:
            self.collector.cancel()

# vi: sts=4 et sw=4
