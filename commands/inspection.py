"""
Inspection commands: list lights and show one light's state.
"""

import click

from huelink.exceptions import HueError
from models.utils import format_state, sort_light_ids
from commands.helpers import report_error, resolve_light
from commands.store import get_client


@click.command(name='lights')
def lights_command():
    """List all lights with their current state."""
    client = get_client()
    if not client:
        return

    try:
        lights = client.list_lights()
    except HueError as e:
        report_error(e)
        return

    if not lights:
        click.echo("No lights found.")
        return

    name_width = max(len(light.name) for light in lights.values())
    click.secho(f"{'ID':>4}  {'Name':<{name_width}}  State", fg='cyan', bold=True)
    for light_id in sort_light_ids(lights):
        light = lights[light_id]
        colour = 'green' if light.is_on else 'white'
        click.echo(f"{light_id:>4}  {light.name:<{name_width}}  "
                   + click.style(format_state(light.state), fg=colour))


@click.command(name='status')
@click.argument('light')
def status_command(light: str):
    """Show details for one light (by id or name)."""
    client = get_client()
    if not client:
        return

    try:
        found = resolve_light(client, light)
    except HueError as e:
        report_error(e)
        return

    if not found:
        click.echo(f"Error: Light '{light}' not found.")
        return

    click.secho(found.name, fg='cyan', bold=True)
    click.echo(f"  ID:           {found.id}")
    click.echo(f"  Type:         {found.type or 'Unknown'}")
    click.echo(f"  Model:        {found.model_id or 'Unknown'}")
    click.echo(f"  Manufacturer: {found.manufacturer or 'Unknown'}")
    click.echo(f"  Firmware:     {found.sw_version or 'Unknown'}")
    click.echo(f"  Reachable:    {'yes' if found.is_reachable else 'no'}")
    click.echo(f"  State:        {format_state(found.state)}")
