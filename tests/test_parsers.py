#!/usr/bin/env -S python3 -B -u
"""
Test suite for the ip / ovs-ofctl / ovs-dpctl output parsers.

Test Categories:
1. Link state detection
2. Address line filtering and relabeling
3. Route filtering
4. Datapath port lines
5. Flow line cleanup
6. Skip counting
"""

import os
import sys
import unittest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.models import DatapathPort, IpsecCredentials, LinkState, ParseStats
from src.core.parsers import (
    is_flow_header, parse_address_line, parse_link_state, parse_lines,
    parse_port_line, parse_route_line, strip_flow_counters
)


LINK_UP = (
    "2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP "
    "mode DEFAULT group default qlen 1000\n"
    "    link/ether 52:54:00:12:34:56 brd ff:ff:ff:ff:ff:ff\n"
)

LINK_DOWN = (
    "3: eth1: <BROADCAST,MULTICAST> mtu 9000 qdisc noop state DOWN mode DEFAULT group default qlen 500\n"
    "    link/ether 52:54:00:ab:cd:ef brd ff:ff:ff:ff:ff:ff\n"
)


class TestLinkStateParsing(unittest.TestCase):
    """Test link state field detection."""

    def test_up_link(self):
        state = parse_link_state(LINK_UP)
        self.assertEqual(state.admin_state, "up")
        self.assertEqual(state.qlen, 1000)
        self.assertEqual(state.hwaddr, "52:54:00:12:34:56")
        self.assertEqual(state.broadcast, "ff:ff:ff:ff:ff:ff")
        self.assertEqual(state.mtu, 1500)
        self.assertFalse(state.dynamic)

    def test_down_link(self):
        state = parse_link_state(LINK_DOWN)
        self.assertEqual(state.admin_state, "down")
        self.assertEqual(state.mtu, 9000)
        self.assertEqual(state.qlen, 500)

    def test_up_flag_without_state_keyword(self):
        state = parse_link_state("5: tap0: <POINTOPOINT,UP> mtu 1400")
        self.assertEqual(state.admin_state, "up")

    def test_unknown_state_has_no_admin_keyword(self):
        state = parse_link_state("1: lo: <LOOPBACK> mtu 65536 qdisc noqueue state UNKNOWN")
        self.assertIsNone(state.admin_state)
        self.assertEqual(state.mtu, 65536)

    def test_dynamic_marker(self):
        state = parse_link_state("4: ppp0: <POINTOPOINT> mtu 1492 dynamic")
        self.assertTrue(state.dynamic)

    def test_link_set_args_order(self):
        args = parse_link_state(LINK_UP).link_set_args()
        self.assertEqual(args, [
            "up", "txqueuelen", "1000", "address", "52:54:00:12:34:56",
            "broadcast", "ff:ff:ff:ff:ff:ff", "mtu", "1500"
        ])

    def test_empty_state(self):
        state = parse_link_state("")
        self.assertEqual(state, LinkState())
        self.assertEqual(state.link_set_args(), [])


class TestAddressParsing(unittest.TestCase):
    """Test address line filtering."""

    def test_global_address_with_label(self):
        record = parse_address_line("    inet 192.168.1.10/24 brd 192.168.1.255 scope global eth0", "eth0")
        self.assertEqual(
            record.to_command("eth0"),
            "ip -f inet addr add 192.168.1.10/24 brd 192.168.1.255 scope global label eth0 dev eth0"
        )

    def test_alias_label(self):
        record = parse_address_line("inet 192.168.1.11/24 scope global secondary eth0:1", "eth0")
        self.assertEqual(record.args, ("192.168.1.11/24", "scope", "global", "secondary", "label", "eth0:1"))

    def test_inet6_address(self):
        record = parse_address_line("inet6 2001:db8::10/64 scope global", "eth0")
        self.assertEqual(record.family, "inet6")
        self.assertEqual(record.to_command("eth0"), "ip -f inet6 addr add 2001:db8::10/64 scope global dev eth0")

    def test_scope_link_skipped(self):
        self.assertIsNone(parse_address_line("inet6 fe80::5054:ff:fe12:3456/64 scope link", "eth0"))
        self.assertIsNone(parse_address_line("inet 169.254.3.4/16 brd 169.254.255.255 scope link eth0", "eth0"))

    def test_dynamic_skipped(self):
        self.assertIsNone(
            parse_address_line("inet 10.0.0.5/8 brd 10.255.255.255 scope global dynamic eth0", "eth0")
        )

    def test_other_lines_skipped(self):
        for line in [
            "2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500",
            "    link/ether 52:54:00:12:34:56 brd ff:ff:ff:ff:ff:ff",
            "       valid_lft forever preferred_lft forever",
            "",
        ]:
            self.assertIsNone(parse_address_line(line, "eth0"), line)

    def test_other_device_name_not_relabeled(self):
        record = parse_address_line("inet 10.1.1.1/24 scope global eth01", "eth0")
        self.assertNotIn("label", record.args)


class TestRouteParsing(unittest.TestCase):
    """Test route filtering."""

    def test_kernel_route_skipped(self):
        self.assertIsNone(parse_route_line("192.168.1.0/24 proto kernel scope link src 192.168.1.10"))

    def test_static_route_kept_verbatim(self):
        entry = parse_route_line("default via 192.168.1.1 proto static metric 100 ")
        self.assertEqual(entry.protocol, "static")
        self.assertEqual(entry.to_command("eth0"), "ip route add default via 192.168.1.1 proto static metric 100 dev eth0")

    def test_route_without_protocol(self):
        entry = parse_route_line("10.10.0.0/16 via 192.168.1.254")
        self.assertIsNone(entry.protocol)
        self.assertFalse(entry.is_kernel)

    def test_blank_line(self):
        self.assertIsNone(parse_route_line("   "))


class TestPortParsing(unittest.TestCase):
    """Test ovs-dpctl show port lines."""

    def test_system_port(self):
        self.assertEqual(parse_port_line("\tport 1: eth1"), DatapathPort(port_no=1, netdev="eth1"))

    def test_port_with_options(self):
        port = parse_port_line("port 3: gre_3 (gre: remote_ip=192.168.1.1, tos=inherit)")
        self.assertEqual(port.port_type, "gre")
        self.assertEqual(port.options, "remote_ip=192.168.1.1,tos=inherit")
        self.assertEqual(port.to_command("dp1"), "ovs-dpctl add-if dp1 gre_3,type=gre,port_no=3,remote_ip=192.168.1.1,tos=inherit")

    def test_port_type_without_options(self):
        port = parse_port_line("port 5: vxlan_5 (vxlan)")
        self.assertEqual(port.port_type, "vxlan")
        self.assertEqual(port.options, "")
        self.assertEqual(port.add_if_argument(), "vxlan_5,type=vxlan,port_no=5")

    def test_non_port_lines(self):
        for line in ["system@dp1:", "lookups: hit:0 missed:0 lost:0", "flows: 0", "port : x"]:
            self.assertIsNone(parse_port_line(line), line)

    def test_ipsec_credentials_appended(self):
        port = parse_port_line("port 4: ipsec_4 (ipsec_gre: remote_ip=10.0.0.2)")
        self.assertTrue(port.is_ipsec_gre)
        credentials = IpsecCredentials(pairs=(("psk", "secret"),))
        self.assertEqual(port.add_if_argument(credentials), "ipsec_4,type=ipsec_gre,port_no=4,remote_ip=10.0.0.2,psk=secret")


class TestFlowLines(unittest.TestCase):
    """Test flow dump cleanup."""

    def test_header_detected(self):
        self.assertTrue(is_flow_header("NXST_FLOW reply (xid=0x4):"))
        self.assertFalse(is_flow_header(" cookie=0x0, duration=1.0s, table=0 actions=NORMAL"))

    def test_age_counters_removed(self):
        line = " cookie=0x0, n_packets=3, idle_age=10,hard_age=20, priority=100,in_port=1 actions=output:2"
        cleaned = strip_flow_counters(line)
        self.assertNotIn("idle_age", cleaned)
        self.assertNotIn("hard_age", cleaned)
        self.assertIn("cookie=0x0, n_packets=3,", cleaned)
        self.assertIn("priority=100,in_port=1 actions=output:2", cleaned)


class TestParseLines(unittest.TestCase):
    """Test the record iterator and its skip counter."""

    def test_counts_parsed_and_skipped(self):
        stats = ParseStats()
        lines = ["port 1: eth1", "flows: 0", "port 2: eth2"]
        ports = list(parse_lines(lines, parse_port_line, stats))
        self.assertEqual([p.netdev for p in ports], ["eth1", "eth2"])
        self.assertEqual(stats.parsed, 2)
        self.assertEqual(stats.skipped, 1)
        self.assertEqual(vars(stats), {"parsed": 2, "skipped": 1})

    def test_without_stats(self):
        self.assertEqual(list(parse_lines(["", " "], parse_route_line)), [])


if __name__ == '__main__':
    unittest.main()
