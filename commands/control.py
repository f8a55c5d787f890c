"""
Control commands for direct manipulation of lights.

Includes power, brightness and colour.
"""

import click

from huelink.exceptions import HueError
from models.light import LightState
from commands.helpers import report_error, resolve_light
from commands.store import get_client


def _apply(light_ref: str, state: LightState, success_message: str):
    """Look up a light and send it a partial state update."""
    client = get_client()
    if not client:
        return

    try:
        light = resolve_light(client, light_ref)
        if not light:
            click.echo(f"Error: Light '{light_ref}' not found.")
            return
        client.set_light_state(light.id, state)
    except HueError as e:
        report_error(e)
        return

    click.echo(f"✓ {light.name} {success_message}")


@click.command()
@click.argument('light')
@click.option('--on/--off', default=True, help='Turn light on or off')
def power_command(light: str, on: bool):
    """Turn a light ON or OFF.

    LIGHT is a light id or name.

    \b
    Examples:
      hue_control.py power "Bedroom" --on
      hue_control.py power 3 --off
    """
    _apply(light, LightState(on=on), f"turned {'ON' if on else 'OFF'}")


@click.command()
@click.argument('light')
@click.argument('brightness', type=click.IntRange(0, 255))
def brightness_command(light: str, brightness: int):
    """Set brightness of a light (0-255).

    Only the brightness is sent; the on/off state is left alone.

    \b
    Examples:
      hue_control.py brightness "Bedroom" 200
      hue_control.py brightness 3 50
    """
    _apply(light, LightState(brightness=brightness), f"brightness set to {brightness}/255")


@click.command()
@click.argument('light')
@click.option('--hue', '-u', type=click.IntRange(0, 65535), help='Hue value (0-65535)')
@click.option('--sat', '-s', type=click.IntRange(0, 254), help='Saturation (0-254)')
@click.option('--ct', '-t', type=click.IntRange(153, 500), help='Colour temperature (153-500 mireds)')
def colour_command(light: str, hue: int | None, sat: int | None, ct: int | None):
    """Set colour or temperature of a light.

    \b
    Examples:
      hue_control.py colour "Bedroom" -u 10000 -s 254
      hue_control.py colour "Bedroom" --ct 300
    """
    if ct is not None:
        if hue is not None or sat is not None:
            click.echo("Error: Use either --hue/--sat or --ct, not both")
            return
        _apply(light, LightState(color_temperature=ct), f"colour temperature set to {ct} mireds")
    elif hue is not None or sat is not None:
        fields = {}
        if hue is not None:
            fields['hue'] = hue
        if sat is not None:
            fields['saturation'] = sat
        _apply(light, LightState(**fields), "colour updated")
    else:
        click.echo("Error: Please specify --hue/-u and --sat/-s, or --ct/-t")
