"""Value types shared by the library and the CLI.

This package contains:
- bridge: BridgeDescriptor and Credential
- light: LightState (with the UNSET sentinel) and Light
- types: TypedDicts for raw wire and config payloads
"""
