"""Core components: errors, logging, configuration, command runner and parsers."""
