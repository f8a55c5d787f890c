"""Credential persistence for the CLI.

The library never writes files; the CLI keeps the paired bridge and its
username in ~/.hue_link/config.json (mode 600). Environment variables
HUE_BRIDGE_IP and HUE_USERNAME take priority over the file.
"""

import json
import os
from pathlib import Path

import click

from huelink.client import BridgeClient
from huelink.config import get_settings
from huelink.transport import HttpTransport
from models.bridge import BridgeDescriptor, Credential
from models.types import StoredCredentials

# User configuration file location
USER_CONFIG_FILE = Path.home() / '.hue_link' / 'config.json'


def load_from_environment() -> StoredCredentials | None:
    """Load bridge address and username from HUE_BRIDGE_IP / HUE_USERNAME."""
    bridge_ip = os.getenv('HUE_BRIDGE_IP')
    username = os.getenv('HUE_USERNAME')
    if bridge_ip and username:
        return {'bridge_ip': bridge_ip, 'username': username}
    return None


def load_from_user_config() -> StoredCredentials | None:
    """Load bridge address and username from the user config file.

    Returns:
        Dict with 'bridge_ip' and 'username', or None if not found
    """
    try:
        if not USER_CONFIG_FILE.exists():
            return None

        with open(USER_CONFIG_FILE, 'r') as f:
            config = json.load(f)

        bridge_ip = config.get('bridge_ip')
        username = config.get('username')

        if bridge_ip and username and isinstance(bridge_ip, str) and isinstance(username, str):
            return {'bridge_ip': bridge_ip, 'username': username}
        return None

    except (json.JSONDecodeError, OSError) as e:
        click.echo(f"Warning: Failed to load config from {USER_CONFIG_FILE}: {e}", err=True)
        return None


def load_stored_credentials() -> StoredCredentials | None:
    """Environment first, then the config file."""
    return load_from_environment() or load_from_user_config()


def save_stored_credentials(bridge: BridgeDescriptor, credential: Credential) -> bool:
    """Save the paired bridge and its username to the user config file.

    Creates the config directory if needed and restricts the file to the
    current user (600).

    Returns:
        True if saved successfully, False otherwise
    """
    try:
        USER_CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)

        config = {}
        if USER_CONFIG_FILE.exists():
            try:
                with open(USER_CONFIG_FILE, 'r') as f:
                    config = json.load(f)
            except (json.JSONDecodeError, OSError):
                # Corrupt file: start fresh
                config = {}

        config['bridge_ip'] = bridge.ip_or_host
        config['username'] = credential.username
        config['bridge'] = bridge.to_dict()

        with open(USER_CONFIG_FILE, 'w') as f:
            json.dump(config, f, indent=2)

        os.chmod(USER_CONFIG_FILE, 0o600)
        return True

    except OSError as e:
        click.echo(f"Error: Failed to save config to {USER_CONFIG_FILE}: {e}", err=True)
        return False


def get_client() -> BridgeClient | None:
    """Build a BridgeClient from stored credentials.

    Prints guidance and returns None when nothing is configured.
    """
    stored = load_stored_credentials()
    if not stored:
        click.echo("Error: No bridge configured.", err=True)
        click.echo("Run 'hue_control.py configure' to pair with your bridge.", err=True)
        return None

    try:
        settings = get_settings()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return None

    return BridgeClient(
        stored['bridge_ip'],
        Credential(stored['username']),
        http=HttpTransport(timeout=settings.http_timeout),
        scheme=settings.scheme,
    )
