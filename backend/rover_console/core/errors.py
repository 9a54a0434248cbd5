class RoverConsoleError(Exception):
    """Base class for errors raised by the console services."""


class ValidationError(RoverConsoleError):
    """Required user input is missing or invalid. Nothing was written."""


class StorageError(RoverConsoleError):
    """The local database rejected an operation. Prior state is kept."""


class RemoteFetchError(RoverConsoleError):
    """The rover API could not be reached or returned an unusable answer."""


class GuardViolation(RoverConsoleError):
    """A mutation was attempted on a read-only (remote) alert."""
