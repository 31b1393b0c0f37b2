#!/usr/bin/env -S python3 -B -u
"""
Datapath exporter.

Outputs a shell script that recreates each datapath and its ports.

An example 'ovs-dpctl show' output looks like this:

    system@dp1:
      lookups: hit:0 missed:0 lost:0
      flows: 0
      port 0: dp1 (internal)
      port 2: eth2
      port 3: gre_3 (gre: remote_ip=192.168.1.1, tos=inherit)
      port 4: gre_4 (gre: remote_ip=192.168.1.2)
      port 5: vxlan_5 (vxlan)

ovs-dpctl does not show the certificate and key options of ipsec_gre
ports, so those are read back from the configuration database with
ovs-vsctl.
"""

from typing import Iterator, List, Tuple

from ..core.models import IpsecCredentials
from ..core.parsers import parse_lines, parse_port_line
from .base import BaseExporter


class DatapathExporter(BaseExporter):
    """Exports each named datapath with its ports."""

    required_tools = ['ovs_dpctl', 'ovs_vsctl']

    def export_one(self, dp: str) -> Iterator[str]:
        yield f"ovs-dpctl add-dp {dp}"

        show = self.runner.run([self.tool('ovs_dpctl'), 'show', dp])
        if not show.ok:
            self.logger.warning(f"Cannot show datapath {dp}", exit_code=show.returncode)
            return

        for port in parse_lines(show.lines(), parse_port_line, self.stats):
            # The port named after the datapath is created with it
            if port.netdev == dp:
                continue

            credentials = None
            if port.is_ipsec_gre:
                credentials = self.get_ipsec_credentials(port.netdev)

            yield port.to_command(dp, credentials)

    def get_interface_option(self, netdev: str, option: str) -> Tuple[bool, str]:
        """
        Read options:OPTION of an interface from the configuration database.

        Returns:
            Tuple of (success, value); value is whatever ovs-vsctl printed
        """
        result = self.runner.run([
            self.tool('ovs_vsctl'), 'get', 'interface', netdev, f'options:{option}'
        ])
        return result.ok, result.stdout.strip()

    def get_ipsec_credentials(self, netdev: str) -> IpsecCredentials:
        """
        Look up the credentials of an ipsec_gre port.

        A peer_cert comes with either a certificate or, for self-signed
        certificates, use_ssl_cert. Without a peer_cert the port uses a
        pre-shared key.
        """
        pairs: List[Tuple[str, str]] = []

        found, peer_cert = self.get_interface_option(netdev, 'peer_cert')
        if found:
            pairs.append(('peer_cert', peer_cert))
            found, certificate = self.get_interface_option(netdev, 'certificate')
            if found:
                pairs.append(('certificate', certificate))
            else:
                found, use_ssl_cert = self.get_interface_option(netdev, 'use_ssl_cert')
                if not found:
                    self.logger.warning(f"{netdev}: neither certificate nor use_ssl_cert is set")
                pairs.append(('use_ssl_cert', use_ssl_cert))
        else:
            found, psk = self.get_interface_option(netdev, 'psk')
            if not found:
                self.logger.warning(f"{netdev}: neither peer_cert nor psk is set")
            pairs.append(('psk', psk))

        return IpsecCredentials(pairs=tuple(pairs))
