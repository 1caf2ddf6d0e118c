"""
Errors raised by the device registry.

Routes translate these into HTTP status codes:

- ``InvalidDeviceIdError``   → 400
- ``DeviceNotFoundError``    → 404
- ``DeviceUnavailableError`` → 503
"""


class RegistryError(Exception):
    """Base class for registry failures."""

    def __init__(self, device_id: str, message: str) -> None:
        super().__init__(message)
        self.device_id = device_id


class InvalidDeviceIdError(RegistryError):
    def __init__(self, device_id: str = "") -> None:
        super().__init__(device_id, "id cannot be empty")


class DeviceNotFoundError(RegistryError):
    def __init__(self, device_id: str) -> None:
        super().__init__(device_id, "ESP not registered")


class DeviceUnavailableError(RegistryError):
    def __init__(self, device_id: str) -> None:
        super().__init__(device_id, f"ESP '{device_id}' is offline")
