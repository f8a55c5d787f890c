"""Utility functions for presenting lights.

This module contains helper functions used by the CLI:
- format_state: One-line summary of a LightState
- sort_light_ids: Order bridge light ids numerically where possible
"""

from models.light import UNSET, LightState


def format_state(state: LightState) -> str:
    """Summarise a light state, e.g. ``ON  bri 200/255  ct 366``."""
    if state.on is UNSET:
        parts = ['?']
    else:
        parts = ['ON ' if state.on else 'OFF']

    if state.brightness is not UNSET:
        parts.append(f"bri {state.brightness}/255")
    if state.color_temperature is not UNSET:
        parts.append(f"ct {state.color_temperature}")
    if state.hue is not UNSET:
        parts.append(f"hue {state.hue}")
    if state.saturation is not UNSET:
        parts.append(f"sat {state.saturation}")
    if state.reachable is False:
        parts.append('(unreachable)')
    return '  '.join(parts)


def sort_light_ids(light_ids) -> list[str]:
    """Sort ids like '2', '10', 'abc' as 2, 10, then non-numeric ids."""
    def key(light_id):
        light_id = str(light_id)
        return (0, int(light_id), '') if light_id.isdigit() else (1, 0, light_id)
    return [str(i) for i in sorted(light_ids, key=key)]
