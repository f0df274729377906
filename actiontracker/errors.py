# Action Tracker Errors


class InvalidInputError(ValueError):
    """Raised when a caller passes records, keys or dates of the wrong shape.

    Services turn this into a 400 response with the message as the error.
    """
