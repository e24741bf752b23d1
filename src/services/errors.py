class ClinicError(Exception):
    """Base class for every error the views turn into a user-facing message."""
    status_code = 500
    message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationMissing(ClinicError):
    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"The field '{field}' is required.")


class AlreadyRegistered(ClinicError):
    status_code = 409
    message = "This email is already registered."


class NotFound(ClinicError):
    status_code = 404
    message = "Record not found."


class PersistenceFailure(ClinicError):
    status_code = 500
    message = "Could not reach the clinic records. Please try again."
