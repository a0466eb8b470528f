"""Exceptions for troveimage."""


class _TroveImageError(Exception):
    """Generic troveimage exception."""


class UsageError(_TroveImageError):
    """Generic error for command line usage."""


class UnexpectedOptionError(UsageError):
    """An option was given that the launcher does not know."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Unexpected option: {flag}")


class MissingArgumentError(UsageError):
    """An option that needs a value was given without one."""

    def __init__(self, flag: str):
        self.flag = flag
        super().__init__(f"Option requires an argument: {flag}")


class ControllerIpNotFoundError(_TroveImageError):
    """Cannot find the address of the controller."""


class BuildError(_TroveImageError):
    """The image builder failed."""

    def __init__(self, message: str, returncode: int = 1):
        self.returncode = returncode
        super().__init__(message)
