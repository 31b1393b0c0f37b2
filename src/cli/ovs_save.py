#!/usr/bin/env -S python3 -B -u
"""
ovs-save: Helper script for Open vSwitch.

Outputs shell scripts on stdout that restore interface, flow table and
datapath state. Meant to be called by the Open vSwitch init script around
a restart of the daemons.

Usage:
    ovs-save save-interfaces eth0 eth1 > /tmp/restore-interfaces.sh
    ovs-save save-flows br0 br1 > /tmp/restore-flows.sh
    ovs-save -vv save-datapaths dp0 > /tmp/restore-datapaths.sh

Environment Variables:
    PATH          - Directories searched for ip, iptables-save and the ovs tools
    OVS_SAVE_CONF - Configuration file (overrides ~/ovs_save.yaml and ./ovs_save.yaml)
"""

import argparse
import sys
from typing import Dict, List, Optional, Sequence

from .. import __version__
from ..core.command_runner import CommandRunner
from ..core.config_loader import (
    get_search_path, get_tool_names, get_verbose_level, load_ovs_save_config
)
from ..core.exceptions import ErrorCode, ErrorHandler, OvsSaveError, UnknownCommandError
from ..core.structured_logging import get_logger, setup_logging
from ..exporters import DatapathExporter, FlowExporter, InterfaceExporter


COMMANDS = {
    'save-interfaces': InterfaceExporter,
    'save-flows': FlowExporter,
    'save-datapaths': DatapathExporter,
}

USAGE = """\
{prog}: Helper script for Open vSwitch.
usage: {prog} [-v] [-c CONFIG] COMMAND [ARG...]

Commands:
 save-interfaces        Outputs a shell script on stdout that will restore
                        the current kernel configuration of the specified
                        network interfaces, as well as the system iptables
                        configuration.
 save-flows             Outputs a shell script on stdout that will restore
                        OpenFlow flows of each Open vSwitch bridge.
 save-datapaths         Outputs a shell script on stdout that will restore
                        the datapaths.

Options:
 -h, --help             Show this help and exit
 -v, --verbose          Increase diagnostics on stderr (-v info, -vv debug, -vvv trace)
 -c, --config CONFIG    Read configuration from CONFIG
 --version              Show the version and exit

This script is meant as a helper for the Open vSwitch init script commands.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors as OvsSaveError."""

    def error(self, message):
        raise OvsSaveError(
            message=message,
            suggestion="Use --help for help",
            error_code=ErrorCode.FAILURE
        )


def create_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog='ovs-save', add_help=False)
    parser.add_argument('-h', '--help', action='store_true')
    parser.add_argument('-v', '--verbose', action='count', default=0)
    parser.add_argument('-c', '--config')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('command', nargs='?')
    parser.add_argument('args', nargs=argparse.REMAINDER)
    return parser


def run_command(
    command: str,
    names: Sequence[str],
    runner: CommandRunner,
    tools: Optional[Dict[str, str]] = None,
    verbose: int = 0
) -> int:
    """
    Run one snapshot command and write its script to stdout.

    Args:
        command: One of the COMMANDS keys
        names: Devices, bridges or datapaths to save
        runner: Runner used for every external tool
        tools: Executable names by tool key
        verbose: Verbosity level

    Returns:
        Exit code
    """
    if command not in COMMANDS:
        raise UnknownCommandError(command)

    exporter = COMMANDS[command](runner, tools, verbose=verbose)
    for line in exporter.export(list(names)):
        print(line)
    sys.stdout.flush()
    return ErrorCode.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    verbose_level = 0

    try:
        args, extras = parser.parse_known_args(argv)
        verbose_level = args.verbose

        if args.help:
            print(USAGE.format(prog=parser.prog), end='')
            return ErrorCode.SUCCESS

        # Unknown options before the command
        if extras:
            raise UnknownCommandError(extras[0])

        if args.command is None:
            return ErrorCode.SUCCESS

        if args.command not in COMMANDS:
            raise UnknownCommandError(args.command)

        # Command-line verbosity applies while the configuration is read
        setup_logging(args.verbose)
        config = load_ovs_save_config(args.config)
        verbose_level = min(get_verbose_level(config) + args.verbose, 3)
        setup_logging(verbose_level)

        logger = get_logger(__name__)
        logger.info(f"Running {args.command}", names=" ".join(args.args))

        runner = CommandRunner(get_search_path(config), verbose=verbose_level)
        return run_command(args.command, args.args, runner, get_tool_names(config), verbose_level)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return ErrorCode.INTERNAL_ERROR
    except Exception as e:
        return ErrorHandler.handle_error(e, verbose_level)


if __name__ == '__main__':
    sys.exit(main())
