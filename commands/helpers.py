"""
Helper functions shared by the light commands.
"""

import click

from huelink.client import BridgeClient
from huelink.exceptions import HueError, NotFoundError, UnauthorizedError
from models.light import Light


def resolve_light(client: BridgeClient, light_ref: str) -> Light | None:
    """Find a light by id, falling back to a case-insensitive name match."""
    if light_ref.isdigit():
        try:
            return client.get_light(light_ref)
        except NotFoundError:
            pass
    return client.find_light(light_ref)


def report_error(error: HueError):
    """Print a bridge/transport failure with a hint on what to do next."""
    click.secho(f"✗ {error}", fg='red', err=True)
    if isinstance(error, UnauthorizedError):
        click.echo("The bridge no longer accepts this username. "
                   "Run 'hue_control.py configure' to pair again.", err=True)
    applied = getattr(error, 'applied', None)
    if applied:
        fields = ', '.join(f"{k}={v}" for k, v in applied.items())
        click.echo(f"Note: the bridge did apply {fields}", err=True)
