"""Exceptions raised by the UBX protocol layer and its transport."""


class UbxError(Exception):
    """Base class for UBX protocol errors."""


class UbxValueError(UbxError, ValueError):
    """A value does not fit the UBX message or configuration item."""


class UbxAckNackError(UbxError):
    """The device refused a request or did not answer it."""


class UbxPayloadError(UbxError):
    """A payload is missing or cannot be built."""


class UsbError(RuntimeError):
    """The USB transport failed."""


class UsbTimeoutError(TimeoutError):
    """A USB read did not complete in time."""

    def __init__(self, message="Timeout"):
        super().__init__(message)