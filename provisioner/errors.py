"""
Error taxonomy for provisioning runs.
"""

from .models.outcome import ErrorKind


class ProvisionError(Exception):
    """Base class for every failure a tool cycle can record."""

    kind: ErrorKind = ErrorKind.PACKAGE_MANAGER

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.message = message
        self.output = output


class ConfigError(ProvisionError):
    """
    Bad input. Detected before any tool is processed it aborts the whole
    run; raised inside a tool cycle it fails only that tool.
    """

    kind = ErrorKind.CONFIG


class PreconditionError(ProvisionError):
    """The machine cannot be provisioned: unsupported OS or no usable sudo."""

    kind = ErrorKind.PRECONDITION


class ResolutionError(ProvisionError):
    kind = ErrorKind.RESOLUTION


class ProbeError(ProvisionError):
    kind = ErrorKind.PROBE


class DownloadError(ProvisionError):
    kind = ErrorKind.DOWNLOAD


class PackageManagerError(ProvisionError):
    kind = ErrorKind.PACKAGE_MANAGER


class PermissionDeniedError(ProvisionError):
    """Elevation is required but not available without a prompt."""

    kind = ErrorKind.PERMISSION


class ProfileWriteError(ProvisionError):
    kind = ErrorKind.PROFILE_WRITE


class StepTimeoutError(ProvisionError):
    kind = ErrorKind.TIMEOUT


class VerificationError(ProvisionError):
    kind = ErrorKind.VERIFICATION
