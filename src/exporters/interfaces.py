#!/usr/bin/env -S python3 -B -u
"""
Interface and firewall exporter.

Outputs a shell script that restores the kernel configuration of the
given network interfaces (link settings, addresses, non-kernel routes)
followed by the system iptables rules.

Example output for one device:

    # eth0
    ip link set dev eth0 down
    ip link set dev eth0 up txqueuelen 1000 address 52:54:00:12:34:56 broadcast ff:ff:ff:ff:ff:ff mtu 1500
    ip addr flush dev eth0 2>/dev/null
    ip -f inet addr add 192.168.1.10/24 brd 192.168.1.255 scope global label eth0 dev eth0
    ip route flush dev eth0 proto boot 2>/dev/null
    ip route add default via 192.168.1.1 proto static dev eth0

"""

from typing import Iterator, Sequence

from ..core.parsers import (
    parse_address_line, parse_link_state, parse_lines, parse_route_line
)
from .base import BaseExporter


class InterfaceExporter(BaseExporter):
    """Exports interface configuration and iptables rules."""

    required_tools = ['ip']

    def export(self, names: Sequence[str]) -> Iterator[str]:
        # Nothing to do, not even a tool check, without devices
        if not names:
            return
        yield from super().export(names)

    def export_one(self, dev: str) -> Iterator[str]:
        ip = self.tool('ip')

        link = self.runner.run([ip, 'link', 'show', 'dev', dev])
        if not link.ok:
            self.logger.debug(f"Skipping device {dev}: link query failed", exit_code=link.returncode)
            return

        yield f"# {dev}"

        # Link state (Ethernet address, up/down, ...)
        link_args = parse_link_state(link.stdout).link_set_args()
        if link_args:
            # Link must be down to change the hardware address
            yield f"ip link set dev {dev} down"
            yield f"ip link set dev {dev} {' '.join(link_args)}"

        # Addresses
        yield f"ip addr flush dev {dev} 2>/dev/null"
        addrs = self.runner.run([ip, 'addr', 'show', 'dev', dev])
        if addrs.ok:
            for record in parse_lines(addrs.lines(), lambda line: parse_address_line(line, dev), self.stats):
                yield record.to_command(dev)
        else:
            self.logger.warning(f"Cannot list addresses of {dev}", exit_code=addrs.returncode)

        # Routes
        yield f"ip route flush dev {dev} proto boot 2>/dev/null"
        routes = self.runner.run([ip, 'route', 'show', 'dev', dev])
        if routes.ok:
            for route in parse_lines(routes.lines(), parse_route_line, self.stats):
                yield route.to_command(dev)
        else:
            self.logger.warning(f"Cannot list routes of {dev}", exit_code=routes.returncode)

        yield ""

    def export_trailer(self) -> Iterator[str]:
        iptables_save = self.tool('iptables_save')

        if not self.runner.exists(iptables_save):
            yield f"# {iptables_save} not found in {self.runner.path_string}, not saving iptables state"
            return

        rules = self.runner.run([iptables_save])
        if not rules.ok:
            self.logger.warning(f"{iptables_save} failed", exit_code=rules.returncode)
            yield f"# {iptables_save} failed, not saving iptables state"
            return

        yield "iptables-restore <<'EOF'"
        yield from rules.lines()
        yield "EOF"
