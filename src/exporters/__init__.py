"""
Exporters that turn live interface, flow and datapath state into
restore scripts.
"""

from .interfaces import InterfaceExporter
from .flows import FlowExporter
from .datapaths import DatapathExporter

__all__ = ['InterfaceExporter', 'FlowExporter', 'DatapathExporter']
