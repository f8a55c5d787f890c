"""
Setup commands: bridge discovery, link button pairing and configuration status.
"""

import click

from huelink.config import (
    DEFAULT_DEVICE_NAME,
    DEFAULT_DISCOVERY_TIMEOUT,
    DEFAULT_MAX_WAIT,
    DEFAULT_POLL_INTERVAL,
    get_settings,
)
from huelink.discovery import describe_bridge, discover
from huelink.exceptions import DiscoveryError, HueError, PairingError, TransportError
from huelink.pairing import PairingSession
from huelink.transport import HttpTransport
from models.bridge import BridgeDescriptor
from commands.store import USER_CONFIG_FILE, get_client, load_stored_credentials, save_stored_credentials


def _strategies(local_only: bool, remote_only: bool) -> tuple[str, ...]:
    if local_only and remote_only:
        raise click.UsageError("--local-only and --remote-only are mutually exclusive")
    if local_only:
        return ('local',)
    if remote_only:
        return ('remote',)
    return ('local', 'remote')


def find_bridges(timeout: float, strategies: tuple[str, ...]) -> list[BridgeDescriptor]:
    """Run discovery and collect the results, reporting socket failures."""
    try:
        settings = get_settings()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return []

    http = HttpTransport(timeout=settings.http_timeout)
    try:
        return list(discover(
            timeout,
            strategies=strategies,
            http=http,
            discovery_url=settings.discovery_url,
        ))
    except DiscoveryError as e:
        click.echo(f"Bridge discovery failed: {e}", err=True)
        return []
    finally:
        http.close()


def select_bridge_interactive(bridges: list[BridgeDescriptor]) -> BridgeDescriptor | None:
    """Display interactive menu to select a bridge from discovered list.

    Returns:
        Selected bridge, or None if cancelled/invalid
    """
    if not bridges:
        return None

    click.echo()
    click.secho(f"Found {len(bridges)} Hue bridge{'s' if len(bridges) > 1 else ''}:", fg='cyan', bold=True)
    click.echo()

    for i, bridge in enumerate(bridges, 1):
        bridge_id = bridge.bridge_id or 'unknown id'
        click.echo(f"  {click.style(str(i), fg='green', bold=True)}. {bridge} - ID: {bridge_id}")

    click.echo()

    try:
        choice = click.prompt(
            f"Select bridge [1-{len(bridges)}] or 'q' to cancel",
            type=str,
            default='1'
        )

        if choice.lower() == 'q':
            return None

        index = int(choice) - 1
        if 0 <= index < len(bridges):
            return bridges[index]
        click.echo(f"Invalid selection: {choice}", err=True)
        return None

    except (ValueError, click.Abort):
        click.echo("\nSelection cancelled.", err=True)
        return None


@click.command()
@click.option('--timeout', '-t', type=click.FloatRange(min=0), default=DEFAULT_DISCOVERY_TIMEOUT,
              show_default=True, help='Seconds to wait for bridges to answer')
@click.option('--local-only', is_flag=True, help='Only use the local multicast probe')
@click.option('--remote-only', is_flag=True, help='Only use the remote lookup service')
@click.option('--describe', is_flag=True, help='Fetch each bridge\'s name from its description document')
def discover_command(timeout: float, local_only: bool, remote_only: bool, describe: bool):
    """Find Hue bridges on the local network.

    \b
    Examples:
      hue_control.py discover
      hue_control.py discover --local-only -t 10
      hue_control.py discover --describe
    """
    strategies = _strategies(local_only, remote_only)
    click.echo("Discovering Hue bridges...")
    bridges = find_bridges(timeout, strategies)

    if not bridges:
        click.secho("No bridges found.", fg='yellow')
        return

    click.secho(f"Found {len(bridges)} bridge{'s' if len(bridges) > 1 else ''}:", fg='cyan', bold=True)
    for bridge in bridges:
        if describe:
            try:
                bridge = describe_bridge(bridge)
            except HueError as e:
                click.echo(f"  (could not describe {bridge.ip_or_host}: {e})", err=True)
        click.echo(f"  • {bridge} - ID: {bridge.bridge_id or 'unknown'}")


@click.command()
@click.option('--bridge', '-b', 'bridge_ip', help='Bridge IP address (skips discovery)')
@click.option('--device-name', '-n', default=DEFAULT_DEVICE_NAME, show_default=True,
              help='Name the bridge stores for this client')
@click.option('--max-wait', type=click.FloatRange(min=0), default=DEFAULT_MAX_WAIT,
              show_default=True, help='Seconds to wait for the link button')
@click.option('--timeout', '-t', type=click.FloatRange(min=0), default=DEFAULT_DISCOVERY_TIMEOUT,
              show_default=True, help='Discovery timeout in seconds')
def configure_command(bridge_ip: str | None, device_name: str, max_wait: float, timeout: float):
    """Pair with a bridge and save the credentials.

    Discovers bridges (unless --bridge is given), asks you to press the
    link button, then saves the bridge address and username to
    ~/.hue_link/config.json.
    """
    if not device_name.strip():
        raise click.BadParameter("must not be empty", param_hint="'--device-name'")
    try:
        settings = get_settings()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        return

    if bridge_ip:
        bridge = BridgeDescriptor(bridge_ip)
    else:
        click.echo("\nDiscovering Hue bridges...")
        bridges = find_bridges(timeout, ('local', 'remote'))

        if not bridges:
            click.secho("⚠ No bridges found via automatic discovery", fg='yellow')
            click.echo()
            if not click.confirm("Enter bridge IP manually?", default=True):
                click.echo("Setup cancelled.")
                return
            bridge = BridgeDescriptor(click.prompt("Bridge IP address", type=str))

        elif len(bridges) == 1:
            bridge = bridges[0]
            click.secho(f"✓ Found 1 bridge: {bridge}", fg='green')
            click.echo()
            if not click.confirm("Use this bridge?", default=True):
                click.echo("Setup cancelled.")
                return

        else:
            bridge = select_bridge_interactive(bridges)
            if not bridge:
                click.echo("Setup cancelled.")
                return

    click.echo()
    click.secho("╔═══════════════════════════════════════════════════════╗", fg='yellow', bold=True)
    click.secho("║  Press the LINK BUTTON on your Hue Bridge             ║", fg='yellow', bold=True)
    click.secho(f"║  Waiting up to {max_wait:>4.0f} seconds                          ║", fg='yellow', bold=True)
    click.secho("╚═══════════════════════════════════════════════════════╝", fg='yellow', bold=True)
    click.echo()

    session = PairingSession(bridge, http=HttpTransport(timeout=settings.http_timeout),
                             scheme=settings.scheme)
    try:
        credential = session.request_credential(device_name, DEFAULT_POLL_INTERVAL, max_wait)
    except (PairingError, TransportError) as e:
        click.secho(f"✗ Failed to create API credentials: {e}", fg='red', err=True)
        return

    click.secho("✓ Successfully created API credentials!", fg='green', bold=True)
    click.echo("Saving credentials...")

    if save_stored_credentials(bridge, credential):
        click.secho(f"✓ Configuration saved to {USER_CONFIG_FILE}", fg='green')
    else:
        click.secho("✗ Failed to save configuration", fg='red')
        click.echo("\nSet these environment variables instead:")
        click.echo(f"  export HUE_BRIDGE_IP={bridge.ip_or_host}")
        click.echo(f"  export HUE_USERNAME={credential.username}")


@click.command()
def setup_command():
    """Show the current configuration and test the connection."""
    stored = load_stored_credentials()
    if not stored:
        click.secho("✗ No bridge configured", fg='red')
        click.echo("Run 'hue_control.py configure' to pair with your bridge.")
        return

    click.secho(f"✓ Bridge: {stored['bridge_ip']}", fg='green')
    client = get_client()
    try:
        lights = client.list_lights()
    except HueError as e:
        click.secho(f"✗ Could not talk to the bridge: {e}", fg='red')
        return
    click.secho(f"✓ Connected ({len(lights)} light{'s' if len(lights) != 1 else ''})", fg='green')
