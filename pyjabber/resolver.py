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

"""DNS SRV record support.

Normative reference:
  - `RFC 2782 <http://www.ietf.org/rfc/rfc2782.txt>`__
"""

__docformat__ = "restructuredtext en"

import logging
import random

import dns.resolver
import dns.exception

from .settings import XMPPSettings

logger = logging.getLogger("pyjabber.resolver")

SERVICE_ALIASES = {"xmpp-client": ("jabber-client", "jabber")}

def shuffle_srv(records):
    """Randomly reorder SRV records using their weights.

    :Parameters:
        - `records`: SRV records to shuffle.
    :Types:
        - `records`: sequence of :dns:`dns.rdtypes.IN.SRV`

    :return: reordered records.
    :returntype: `list` of :dns:`dns.rdtypes.IN.SRV`"""
    if not records:
        return []
    records = list(records)
    ret = []
    while len(records) > 1:
        weight_sum = 0
        for rrecord in records:
            weight_sum += rrecord.weight + 0.1
        thres = random.random() * weight_sum
        weight_sum = 0
        for rrecord in records:
            weight_sum += rrecord.weight + 0.1
            if thres < weight_sum:
                records.remove(rrecord)
                ret.append(rrecord)
                break
    ret.append(records[0])
    return ret

def reorder_srv(records):
    """Reorder SRV records using their priorities and weights.

    :Parameters:
        - `records`: SRV records to shuffle.
    :Types:
        - `records`: `list` of :dns:`dns.rdtypes.IN.SRV`

    :return: reordered records.
    :returntype: `list` of :dns:`dns.rdtypes.IN.SRV`"""
    records = sorted(records, key = lambda rrecord: rrecord.priority)
    ret = []
    tmp = []
    for rrecord in records:
        if not tmp or rrecord.priority == tmp[0].priority:
            tmp.append(rrecord)
            continue
        ret += shuffle_srv(tmp)
        tmp = [rrecord]
    if tmp:
        ret += shuffle_srv(tmp)
    return ret

def resolve_srv(domain, service, proto = "tcp"):
    """Resolve service domain to server name and port number using SRV
    records.

    A built-in service alias table will be used to lookup also some obsolete
    record names.

    :Parameters:
        - `domain`: domain name.
        - `service`: service name.
        - `proto`: protocol name.
    :Types:
        - `domain`: `str`
        - `service`: `str`
        - `proto`: `str`

    :return: host names and port numbers for the service or `None`.
    :returntype: `list` of (`str`, `int`)"""
    names_to_try = ["_{0}._{1}.{2}".format(service, proto, domain)]
    for alias in SERVICE_ALIASES.get(service, ()):
        names_to_try.append("_{0}._{1}.{2}".format(alias, proto, domain))
    for name in names_to_try:
        name = name.encode("idna").decode("ascii")
        try:
            answer = dns.resolver.resolve(name, "SRV")
        except dns.exception.DNSException as err:
            logger.debug("SRV lookup for {0!r} failed: {1}".format(name, err))
            continue
        records = list(answer)
        if not records:
            continue
        if len(records) == 1 and records[0].target.to_text() == ".":
            logger.debug("Service {0!r} decidedly not available"
                                                            .format(name))
            return None
        return [(rrecord.target.to_text(omit_final_dot = True),
                                    rrecord.port)
                                        for rrecord in reorder_srv(records)]
    return None

XMPPSettings.add_setting("c2s_service", type = str, default = "xmpp-client",
        doc = """The SRV service name used to look up the server address."""
    )
XMPPSettings.add_setting("use_srv", type = bool, default = False,
        doc = """Look up the server address and port with a DNS SRV query
before connecting. The domain name itself is used when no record is found."""
    )

# vi: sts=4 et sw=4
