# Device registry and command model
from app.devices.commands import (
    CLI_COMMANDS,
    FORCE,
    NO_COMMAND,
    PULSE,
    STATUS,
    Command,
    CommandKind,
)
from app.devices.errors import (
    DeviceNotFoundError,
    DeviceUnavailableError,
    InvalidDeviceIdError,
    RegistryError,
)
from app.devices.registry import (
    DeviceRegistry,
    DeviceSnapshot,
    HealthSummary,
    LivenessTransition,
)

__all__ = [
    "CLI_COMMANDS",
    "FORCE",
    "NO_COMMAND",
    "PULSE",
    "STATUS",
    "Command",
    "CommandKind",
    "DeviceNotFoundError",
    "DeviceUnavailableError",
    "InvalidDeviceIdError",
    "RegistryError",
    "DeviceRegistry",
    "DeviceSnapshot",
    "HealthSummary",
    "LivenessTransition",
]
