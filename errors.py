"""Exceptions raised by the ACW02 bridge."""


class Acw02Error(Exception):
    """Base class for bridge errors."""


class InvalidArgument(Acw02Error, ValueError):
    """A requested value is outside the domain of a property."""


class ConfigurationError(Acw02Error):
    """A role, property or configuration setting is not wired up."""


class TransportFailure(Acw02Error):
    """A read, write or command call to the device failed."""
