#!/usr/bin/env -S python3 -B -u
"""
Data Models for ovs-save

Immutable records parsed from the text output of ip, ovs-dpctl and
ovs-vsctl. Each record knows how to render the shell command that
recreates the state it describes. Records are built once per invocation
and discarded after being printed.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


ADDRESS_FAMILIES = ("inet", "inet6")
DEFAULT_PORT_TYPE = "system"
IPSEC_GRE_TYPE = "ipsec_gre"


@dataclass(frozen=True)
class LinkState:
    """
    Link-level settings of one network device.

    Every field is optional and detected independently; a field left at
    its default was absent from the link-state text.
    """
    admin_state: Optional[str] = None  # "up" or "down"
    dynamic: bool = False
    qlen: Optional[int] = None
    hwaddr: Optional[str] = None
    broadcast: Optional[str] = None
    mtu: Optional[int] = None

    def link_set_args(self) -> List[str]:
        """Arguments for ``ip link set dev DEV ...``, in a fixed order."""
        args: List[str] = []
        if self.admin_state:
            args.append(self.admin_state)
        if self.dynamic:
            args.append("dynamic")
        if self.qlen is not None:
            args.extend(["txqueuelen", str(self.qlen)])
        if self.hwaddr:
            args.extend(["address", self.hwaddr])
        if self.broadcast:
            args.extend(["broadcast", self.broadcast])
        if self.mtu is not None:
            args.extend(["mtu", str(self.mtu)])
        return args


@dataclass(frozen=True)
class AddressRecord:
    """An address assigned to a device, ready to be re-added."""
    family: str
    args: Tuple[str, ...]

    def to_command(self, dev: str) -> str:
        return f"ip -f {self.family} addr add {' '.join(self.args)} dev {dev}"


@dataclass(frozen=True)
class RouteEntry:
    """A route through a device, kept as the text ip printed."""
    text: str
    protocol: Optional[str] = None

    @property
    def is_kernel(self) -> bool:
        return self.protocol == "kernel"

    def to_command(self, dev: str) -> str:
        return f"ip route add {self.text} dev {dev}"


@dataclass(frozen=True)
class IpsecCredentials:
    """Credential options of an ipsec_gre port, in emission order."""
    pairs: Tuple[Tuple[str, str], ...] = ()

    def to_options(self) -> str:
        return ",".join(f"{key}={value}" for key, value in self.pairs)


@dataclass(frozen=True)
class DatapathPort:
    """One port of a datapath as reported by ``ovs-dpctl show``."""
    port_no: int
    netdev: str
    port_type: str = DEFAULT_PORT_TYPE
    options: str = ""

    @property
    def is_ipsec_gre(self) -> bool:
        return self.port_type == IPSEC_GRE_TYPE

    def add_if_argument(self, credentials: Optional[IpsecCredentials] = None) -> str:
        """Interface argument for ``ovs-dpctl add-if``: NETDEV,type=T,port_no=N[,OPTIONS]."""
        argument = f"{self.netdev},type={self.port_type},port_no={self.port_no}"
        if self.options:
            argument += f",{self.options}"
        if credentials and credentials.pairs:
            argument += f",{credentials.to_options()}"
        return argument

    def to_command(self, datapath: str, credentials: Optional[IpsecCredentials] = None) -> str:
        return f"ovs-dpctl add-if {datapath} {self.add_if_argument(credentials)}"


@dataclass
class ParseStats:
    """Diagnostic counter for parsed and skipped lines."""
    parsed: int = 0
    skipped: int = 0

    def record(self, accepted: bool) -> None:
        if accepted:
            self.parsed += 1
        else:
            self.skipped += 1
