"""CLI command modules.

This package contains:
- setup: Discovery, pairing (configure) and configuration status
- inspection: Light listing and status
- control: Direct control commands (power, brightness, colour)
- store: Credential persistence for the CLI
- helpers: Shared helpers for the light commands
"""
