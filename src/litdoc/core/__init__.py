"""Litdoc core package: run context, configuration, errors and exit codes."""
