class ServiceError(Exception):
    """Unexpected failure whose message is safe to return to the client."""

    status_code = 500


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class OrderValidationError(ServiceError):
    """An order was rejected; ``details`` holds one message per failing item."""

    status_code = 400

    def __init__(self, details, message="Order validation failed"):
        super().__init__(message)
        self.details = list(details)
