"""Light resources and their (partial) state.

A ``LightState`` doubles as a read model and as a partial update: any field
left as ``UNSET`` is simply not part of the state. ``UNSET`` is distinct from
``None``, ``False`` and ``0`` because zero is a valid brightness.
"""

from dataclasses import dataclass, field, fields


class _Unset:
    """Marker type for a field that was never populated."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Unset, ())


UNSET = _Unset()

# Inclusive (min, max) bounds for numeric state fields
STATE_RANGES = {
    'brightness': (0, 255),
    'hue': (0, 65535),
    'saturation': (0, 254),
    'color_temperature': (1, 65535),
}

READ_ONLY_FIELDS = frozenset({'reachable'})


@dataclass(frozen=True)
class LightState:
    """State of a light, or the subset of it a caller wants to change."""
    on: bool | _Unset = UNSET
    brightness: int | _Unset = UNSET
    hue: int | _Unset = UNSET
    saturation: int | _Unset = UNSET
    color_temperature: int | _Unset = UNSET
    reachable: bool | _Unset = UNSET

    def __post_init__(self):
        for name in ('on', 'reachable'):
            value = getattr(self, name)
            if value is not UNSET and not isinstance(value, bool):
                raise ValueError(f"{name} must be a bool, got {value!r}")

        for name, (low, high) in STATE_RANGES.items():
            value = getattr(self, name)
            if value is UNSET:
                continue
            # bool is an int subclass; True is not a brightness
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if not low <= value <= high:
                raise ValueError(f"{name} must be between {low} and {high}, got {value}")

    def populated(self) -> dict:
        """Return ``{field_name: value}`` for every field that is set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def writable(self) -> dict:
        """Populated fields minus the read-only ones."""
        return {k: v for k, v in self.populated().items() if k not in READ_ONLY_FIELDS}

    def is_empty(self) -> bool:
        return not self.populated()


@dataclass(frozen=True)
class Light:
    """A light as reported by the bridge."""
    id: str
    name: str
    state: LightState = field(default_factory=LightState)
    type: str = ''
    model_id: str | None = None
    manufacturer: str | None = None
    unique_id: str | None = None
    sw_version: str | None = None

    @property
    def is_on(self) -> bool:
        return self.state.on is True

    @property
    def is_reachable(self) -> bool:
        return self.state.reachable is True
