"""Exception types raised by the tutor."""


class TutorError(Exception):
    """Base class for tutor errors."""


class BackendUnavailable(TutorError):
    """The document store could not be read or written."""


class NotFound(TutorError):
    """A required document does not exist."""


class ContentError(TutorError, ValueError):
    """Chapter or question data is malformed."""
