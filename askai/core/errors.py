"""Error taxonomy for the ask pipeline.

ValidationError maps to a 400 with its message; every ProcessingError maps
to an opaque 500.
"""


class ValidationError(Exception):
    """Client input rejected before any external call."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProcessingError(Exception):
    """Any failure after validation, or while parsing the body."""
    stage = "processing"


class ParseError(ProcessingError):
    """Request body could not be decoded as a form."""
    stage = "parse"


class RelayError(ProcessingError):
    """Image could not be staged locally or uploaded to the Files API."""
    stage = "relay"


class InvocationError(ProcessingError):
    """Chat call failed or produced no text."""
    stage = "invoke"
