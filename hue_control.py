#!/usr/bin/env python3
"""
Hue Lights Control CLI
Find your Hue bridge, pair with it, and switch lights.
"""

import logging

import click

from huelink import __version__
from commands.setup import configure_command, discover_command, setup_command
from commands.inspection import lights_command, status_command
from commands.control import power_command, brightness_command, colour_command


@click.group(
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 120
    }
)
@click.option('--verbose', '-v', is_flag=True, help='Log protocol traffic to stderr')
@click.version_option(version=__version__, prog_name='Hue Control')
def cli(verbose: bool):
    """Hue Lights Control CLI - discover, pair with, and control a Hue bridge.

Run 'configure' for first-time setup (press the bridge's link button when asked),
then 'lights' to see what is connected.

Credentials: HUE_BRIDGE_IP/HUE_USERNAME environment → ~/.hue_link/config.json"""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')


# Register setup commands
cli.add_command(discover_command, name='discover')
cli.add_command(configure_command, name='configure')
cli.add_command(setup_command, name='setup')

# Register inspection commands
cli.add_command(lights_command)
cli.add_command(status_command)

# Register control commands
cli.add_command(power_command, name='power')
cli.add_command(brightness_command, name='brightness')
cli.add_command(colour_command, name='colour')


if __name__ == '__main__':
    cli()
