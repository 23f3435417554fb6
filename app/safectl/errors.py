"""Exception hierarchy for safectl.

Every error raised by the library derives from SafectlError so the CLI
can report it uniformly. Backends raise the precise subclass and chain
the underlying cause with ``raise ... from``.
"""


class SafectlError(Exception):
    """Base exception for all safectl errors."""


class ConfigurationError(SafectlError):
    """Raised for invalid settings such as an unknown provider.

    Configuration errors are detected before any read or write happens.
    """


class NotFoundError(SafectlError):
    """Raised when a store, stack or named key does not exist."""


class CorruptStateError(SafectlError):
    """Raised when persisted store data cannot be parsed."""


class StoreError(SafectlError):
    """Raised when the backing medium of a store cannot be read or written."""


class PreconditionError(SafectlError):
    """Raised when a deploy cannot start, e.g. required values are missing."""


class PartialFailureError(SafectlError):
    """Raised for secondary steps that fail after the primary writes succeeded."""


class PromptAbortedError(SafectlError):
    """Raised when the operator aborts an interactive prompt."""
