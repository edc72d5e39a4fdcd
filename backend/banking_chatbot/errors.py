"""Error taxonomy for the chat pipeline.

Every error carries an HTTP status and a message that is safe to show the
caller. Full detail stays in the exception chain and the server log.
"""


class ChatbotError(Exception):
    """Base class for errors the HTTP layer knows how to report."""

    status_code = 500
    public_message = "An internal error occurred. Please try again later."

    def __init__(self, message: str = "", public_message: str = ""):
        super().__init__(message or self.public_message)
        if public_message:
            self.public_message = public_message


class InvalidArgumentError(ChatbotError):
    """A required request field is missing or blank."""

    status_code = 400
    public_message = "Invalid request."

    def __init__(self, message: str):
        super().__init__(message, public_message=message)


class ServiceUnavailableError(ChatbotError):
    """The ledger store could not be reached after retries."""

    status_code = 503
    public_message = (
        "Database connection failed after multiple attempts. Please try again later."
    )


class ServiceError(ChatbotError):
    """A ledger query failed after the store was reachable."""

    public_message = "Failed to retrieve transaction data. Please try again later."


class UpstreamFailureError(ChatbotError):
    """The reasoning service raised or returned something unusable."""

    public_message = "The assistant is temporarily unavailable. Please try again later."


class NoResultError(ChatbotError):
    """The reasoning service produced neither a tool call nor text."""


class ModelNotReadyError(ChatbotError):
    """The reasoning adapter was never initialized."""

    public_message = "The assistant model is not ready. Please try again later."


class UnknownToolError(ChatbotError):
    """The reasoning service asked for a tool we do not provide.

    Reported back to the model as a tool-error payload, never to the caller.
    """
