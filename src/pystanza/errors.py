class StanzaError(Exception):
    """Base class for pystanza errors."""


class SpecificationError(StanzaError, ValueError):
    """Raised when a section or option specification is malformed."""


class SpecLoadError(StanzaError):
    """Raised when a specification file cannot be parsed."""


class RegistrationError(StanzaError):
    """Raised when a section group cannot be registered."""


class DuplicateConfigTypeError(RegistrationError):
    """Raised when a config type is registered twice."""


class DuplicateSectionError(RegistrationError):
    """Raised when a section name appears twice in one group."""


class DuplicateOptionError(RegistrationError):
    """Raised when an option name appears twice in one section."""


class FlagCollisionError(RegistrationError):
    """Raised when two options claim the same command-line flag."""
