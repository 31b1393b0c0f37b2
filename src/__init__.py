#!/usr/bin/env -S python3 -B -u
"""
ovssave - Open vSwitch state snapshot helper

Saves interface, flow table and datapath state as shell commands that
restore it across a restart of the Open vSwitch daemons.
"""

__version__ = '1.0.0'
__author__ = 'ovs-save developers'
__license__ = 'MIT'

# Package metadata
__all__ = [
    'core',
    'exporters',
    'cli',
]
