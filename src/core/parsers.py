#!/usr/bin/env -S python3 -B -u
"""
Text parsers for ip, ovs-ofctl and ovs-dpctl output.

Each parser takes one line (or one block, for link state) and returns a
record from models, or None when the line carries nothing restorable.
``parse_lines`` turns a parser into an iterator that drops the None
results and counts them.
"""

import re
from typing import Callable, Iterable, Iterator, Optional, TypeVar

from .models import (
    ADDRESS_FAMILIES, DEFAULT_PORT_TYPE,
    AddressRecord, DatapathPort, LinkState, ParseStats, RouteEntry
)


T = TypeVar('T')

# Link state patterns. The greedy prefix makes the last occurrence win.
_STATE_UP_RE = re.compile(r'state UP|[,<]UP[,>]')
_STATE_DOWN_RE = re.compile(r'state DOWN')
_DYNAMIC_RE = re.compile(r'\bdynamic\b')
_QLEN_RE = re.compile(r'.*qlen (\d+)', re.S)
_HWADDR_RE = re.compile(r'.*link/ether (\S+)', re.S)
_BRD_RE = re.compile(r'.*brd (\S+)', re.S)
_MTU_RE = re.compile(r'.*mtu (\d+)', re.S)

# Flow dump filters
FLOW_HEADER_MARKER = 'NXST_FLOW'
_IDLE_AGE_RE = re.compile(r'idle_age=[^,]*,')
_HARD_AGE_RE = re.compile(r'hard_age=[^,]*,')

# "port 3: gre_3 (gre: remote_ip=192.168.1.1, tos=inherit)"
_PORT_RE = re.compile(r'^port (\d+):\s*(.*)$')
_PORT_TYPE_RE = re.compile(r'\((.*)\)')


def parse_link_state(text: str) -> LinkState:
    """
    Parse the output of ``ip link show dev DEV``.

    Args:
        text: Raw link-state text, possibly several lines

    Returns:
        LinkState with every detected field set
    """
    admin_state = None
    if _STATE_UP_RE.search(text):
        admin_state = "up"
    elif _STATE_DOWN_RE.search(text):
        admin_state = "down"

    qlen = _QLEN_RE.match(text)
    hwaddr = _HWADDR_RE.match(text)
    brd = _BRD_RE.match(text)
    mtu = _MTU_RE.match(text)

    return LinkState(
        admin_state=admin_state,
        dynamic=bool(_DYNAMIC_RE.search(text)),
        qlen=int(qlen.group(1)) if qlen else None,
        hwaddr=hwaddr.group(1) if hwaddr else None,
        broadcast=brd.group(1) if brd else None,
        mtu=int(mtu.group(1)) if mtu else None,
    )


def parse_address_line(line: str, dev: str) -> Optional[AddressRecord]:
    """
    Parse one line of ``ip addr show dev DEV``.

    Returns None for lines that are not inet/inet6 addresses, for
    kernel-maintained (dynamic) addresses and for scope link addresses.
    A token naming the device, or one of its aliases (DEV:N), is the
    address label and is rendered as ``label TOKEN``.
    """
    tokens = line.split()
    if not tokens or tokens[0] not in ADDRESS_FAMILIES:
        return None

    family = tokens[0]
    rest = tokens[1:]
    args = []
    for i, token in enumerate(rest):
        if token == "dynamic":
            return None
        if token == "scope" and i + 1 < len(rest) and rest[i + 1] == "link":
            return None
        if token == dev or token.startswith(f"{dev}:"):
            args.extend(["label", token])
        else:
            args.append(token)

    if not args:
        return None
    return AddressRecord(family=family, args=tuple(args))


def parse_route_line(line: str) -> Optional[RouteEntry]:
    """
    Parse one line of ``ip route show dev DEV``.

    Returns None for blank lines and for routes installed by the kernel
    itself (``proto kernel``).
    """
    text = line.strip()
    if not text:
        return None

    tokens = text.split()
    protocol = None
    for i, token in enumerate(tokens[:-1]):
        if token == "proto":
            protocol = tokens[i + 1]
            break

    entry = RouteEntry(text=text, protocol=protocol)
    if entry.is_kernel:
        return None
    return entry


def parse_port_line(line: str) -> Optional[DatapathPort]:
    """
    Parse one line of ``ovs-dpctl show DP``.

    Lines that do not start with ``port N:`` return None. The optional
    parenthesized part carries the port type and its options; a port
    without one is a plain system port.
    """
    match = _PORT_RE.match(line.strip())
    if not match:
        return None

    port_no = int(match.group(1))
    rest = match.group(2)
    tokens = rest.split()
    if not tokens:
        return None
    netdev = tokens[0]

    port_type = DEFAULT_PORT_TYPE
    options = ""
    type_match = _PORT_TYPE_RE.search(rest)
    if type_match:
        inner = type_match.group(1)
        if ":" in inner:
            port_type, options = inner.split(":", 1)
            options = options.strip().replace(", ", ",")
        else:
            port_type = inner
        port_type = port_type.strip() or DEFAULT_PORT_TYPE

    return DatapathPort(port_no=port_no, netdev=netdev, port_type=port_type, options=options)


def is_flow_header(line: str) -> bool:
    """Check for the statistics header line of ``ovs-ofctl dump-flows``."""
    return FLOW_HEADER_MARKER in line


def strip_flow_counters(line: str) -> str:
    """Remove the idle_age and hard_age counters from a flow line."""
    line = _IDLE_AGE_RE.sub('', line)
    return _HARD_AGE_RE.sub('', line)


def parse_lines(
    lines: Iterable[str],
    parser: Callable[[str], Optional[T]],
    stats: Optional[ParseStats] = None
) -> Iterator[T]:
    """
    Apply parser to each line and yield only the records it returns.

    Args:
        lines: Lines of tool output
        parser: Function returning a record or None
        stats: Optional counter updated for every line

    Yields:
        Parsed records, in input order
    """
    for line in lines:
        record = parser(line)
        if stats is not None:
            stats.record(record is not None)
        if record is not None:
            yield record
