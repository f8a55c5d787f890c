"""Bridge and credential value objects.

Both are immutable and serialisable to plain dicts so that the caller can
persist them (the library itself never writes files).
"""

from dataclasses import dataclass


@dataclass(frozen=True, eq=False)
class BridgeDescriptor:
    """A bridge found by discovery (or entered by hand).

    Two descriptors are equal when they have the same ``key``, so sightings of
    one bridge with more or less detail collapse in a set.

    Args:
        ip_or_host: Address the bridge answers on, optionally with ``:port``
        bridge_id: Bridge identifier (usually the 16 hex digit serial), if known
        friendly_name: Human readable name, if known
    """
    ip_or_host: str
    bridge_id: str | None = None
    friendly_name: str | None = None

    def __post_init__(self):
        if not self.ip_or_host or not isinstance(self.ip_or_host, str):
            raise ValueError("ip_or_host must be a non-empty string")

    @property
    def key(self) -> str:
        """Identity of the bridge: its id when known, otherwise its address."""
        if self.bridge_id:
            return self.bridge_id.lower()
        return self.ip_or_host

    def __eq__(self, other):
        if not isinstance(other, BridgeDescriptor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def merge(self, other: 'BridgeDescriptor') -> 'BridgeDescriptor':
        """Combine two sightings of the same bridge, preferring our own values."""
        return BridgeDescriptor(
            ip_or_host=self.ip_or_host,
            bridge_id=self.bridge_id or other.bridge_id,
            friendly_name=self.friendly_name or other.friendly_name,
        )

    def to_dict(self) -> dict:
        return {
            'ip_or_host': self.ip_or_host,
            'bridge_id': self.bridge_id,
            'friendly_name': self.friendly_name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BridgeDescriptor':
        return cls(
            ip_or_host=data['ip_or_host'],
            bridge_id=data.get('bridge_id'),
            friendly_name=data.get('friendly_name'),
        )

    def __str__(self) -> str:
        name = self.friendly_name or 'Hue bridge'
        return f"{name} ({self.ip_or_host})"


@dataclass(frozen=True)
class Credential:
    """Username token issued by a bridge after the link button was pressed."""
    username: str

    def __post_init__(self):
        if not self.username or not isinstance(self.username, str):
            raise ValueError("username must be a non-empty string")

    def __repr__(self) -> str:
        return f"Credential(username='{self.username[:4]}...')"

    def to_dict(self) -> dict:
        return {'username': self.username}

    @classmethod
    def from_dict(cls, data: dict) -> 'Credential':
        return cls(username=data['username'])
