"""Agritrace CLI — Typer-based command-line interface.

Provides the ``agritrace`` command with subcommands for listing batches,
showing a batch timeline, recording events, and verifying the local
ledger.

All output uses Rich for formatted terminal display.
"""
