#!/usr/bin/env -S python3 -B -u
"""
Flow table exporter.

Outputs a shell script that restores the OpenFlow flows of each bridge.
The idle_age and hard_age counters are runtime values that add-flows
does not accept, so they are removed from every flow.
"""

from typing import Iterator

from ..core.parsers import is_flow_header, strip_flow_counters
from .base import BaseExporter


class FlowExporter(BaseExporter):
    """Exports the flow table of each named bridge."""

    required_tools = ['ovs_ofctl']

    def export_one(self, bridge: str) -> Iterator[str]:
        ovs_ofctl = self.tool('ovs_ofctl')

        yield f"ovs-ofctl add-flows {bridge} - << EOF"

        flows = self.runner.run([ovs_ofctl, 'dump-flows', bridge])
        if not flows.ok:
            self.logger.warning(f"Cannot dump flows of {bridge}", exit_code=flows.returncode)

        for line in flows.lines():
            if is_flow_header(line):
                self.stats.record(False)
                continue
            self.stats.record(True)
            yield strip_flow_counters(line)

        yield "EOF"
