#!/usr/bin/env -S python3 -B -u
"""
Structured Exception Hierarchy for ovs-save

This module provides the exception hierarchy used by the state snapshot
commands, with user-friendly messages and suggested actions.

Key Features:
- Structured exceptions for missing tools, bad commands and configuration
- Suggested actions for error resolution
- Debug information available only in verbose mode
- Exit codes that match what service-lifecycle scripts expect
"""

import sys
import traceback
from typing import Optional, Dict, Any, List, Union
from enum import IntEnum


class ErrorCode(IntEnum):
    """Standard exit codes for the application."""
    SUCCESS = 0
    FAILURE = 1
    CONFIGURATION_ERROR = 11
    INTERNAL_ERROR = 15


# Package that ships each wrapped tool, used for suggestions
TOOL_PACKAGES = {
    'ip': 'iproute2',
    'iptables-save': 'iptables',
    'ovs-ofctl': 'openvswitch-switch',
    'ovs-dpctl': 'openvswitch-switch',
    'ovs-vsctl': 'openvswitch-switch',
}


class OvsSaveError(Exception):
    """
    Base exception class for all ovs-save errors.

    Provides structured error information with user-friendly messages
    and suggested actions for resolution.
    """

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize error with structured information.

        Args:
            message: User-friendly error message
            suggestion: Suggested action to resolve the error
            error_code: Exit code for the error
            details: Additional error details (shown only in verbose mode)
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def format_error(self, verbose_level: int = 0) -> str:
        """
        Format error message based on verbosity level.

        Args:
            verbose_level: 0=basic, 1=verbose, 2=debug, 3=full details

        Returns:
            Formatted error message
        """
        lines = [f"Error: {self.message}"]

        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")

        if verbose_level >= 1 and self.details:
            lines.append("\nDetails:")
            for key, value in self.details.items():
                lines.append(f"  {key}: {value}")

        if verbose_level >= 2 and self.cause:
            lines.append(f"\nCaused by: {type(self.cause).__name__}: {str(self.cause)}")

        if verbose_level >= 3:
            lines.append("\nStack trace:")
            if self.__traceback__ is not None:
                lines.append(''.join(traceback.format_tb(self.__traceback__)))
            else:
                lines.append("(No active exception - stack trace not available)")

        return "\n".join(lines)


# Configuration Errors

class ConfigurationError(OvsSaveError):
    """Raised when there are configuration-related issues."""

    def __init__(self, message: str, config_file: Optional[str] = None, **kwargs):
        suggestion = "Check your configuration file format and values."
        if config_file:
            suggestion += f" Configuration file: {config_file}"
            kwargs['details'] = kwargs.get('details', {})
            kwargs['details']['config_file'] = config_file
        super().__init__(
            message=message,
            suggestion=suggestion,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            **kwargs
        )


# Command Line Errors

class UnknownCommandError(OvsSaveError):
    """Raised when the dispatcher is given a command it does not know."""

    def __init__(self, command: str, **kwargs):
        super().__init__(
            message=f'unknown command "{command}" (use --help for help)',
            error_code=ErrorCode.FAILURE,
            details={"command": command},
            **kwargs
        )


# Execution Errors

class ExecutionError(OvsSaveError):
    """Base class for errors raised while running external tools."""

    def __init__(self, message: str, **kwargs):
        if 'error_code' not in kwargs:
            kwargs['error_code'] = ErrorCode.FAILURE
        super().__init__(
            message=message,
            **kwargs
        )


class ToolNotFoundError(ExecutionError):
    """Raised when a required tool cannot be located in the search path."""

    def __init__(self, tool: str, search_path: Union[str, List[str], None] = None, **kwargs):
        if isinstance(search_path, (list, tuple)):
            search_path = ':'.join(search_path)
        search_path = search_path or ''
        package = TOOL_PACKAGES.get(tool)
        if package:
            suggestion = f"Install the {package} package or add the directory containing {tool} to the search path."
        else:
            suggestion = f"Add the directory containing {tool} to the search path."

        super().__init__(
            message=f"{tool} not found in {search_path}",
            suggestion=suggestion,
            details={"tool": tool, "search_path": search_path},
            **kwargs
        )
        self.tool = tool


# Error Handler Utility

class ErrorHandler:
    """Utility class for consistent error handling across the application."""

    @staticmethod
    def handle_error(error: Exception, verbose_level: int = 0) -> int:
        """
        Handle an error and return appropriate exit code.

        Args:
            error: The exception to handle
            verbose_level: Verbosity level (0-3)

        Returns:
            Exit code for the application
        """
        if isinstance(error, OvsSaveError):
            print(error.format_error(verbose_level), file=sys.stderr)
            return error.error_code

        # Handle unexpected errors
        print("Error: An unexpected error occurred", file=sys.stderr)
        print("Suggestion: This might be a bug. Please report it with the full error output.", file=sys.stderr)

        if verbose_level >= 1:
            print(f"\nError type: {type(error).__name__}", file=sys.stderr)
            print(f"Error message: {str(error)}", file=sys.stderr)

        if verbose_level >= 3:
            print("\nStack trace:", file=sys.stderr)
            traceback.print_exception(type(error), error, error.__traceback__, file=sys.stderr)

        return ErrorCode.INTERNAL_ERROR
