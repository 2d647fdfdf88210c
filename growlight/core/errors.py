from __future__ import annotations


class ConfigInvalid(Exception):
    """Schedule or account configuration could not be loaded."""


class LampControlError(Exception):
    """Base class for failures talking to the lamp."""


class AuthenticationFailed(LampControlError):
    pass


class DeviceNotFound(LampControlError):
    pass


class CommandRejected(LampControlError):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class TransportError(LampControlError):
    pass
