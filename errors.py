"""Exceptions raised by the Well-Architected export job and the upload utility."""


class ExportError(Exception):
    """Base class for every fatal export error."""


class ConfigurationError(ExportError, EnvironmentError):
    """Missing or invalid environment-derived settings."""


class TransportError(ExportError):
    """AWS or Logz.io network/service failure."""


class SerializationError(ExportError):
    """A document could not be converted to or from JSON."""
