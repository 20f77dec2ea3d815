class FlightBookingError(Exception):
    """
    Base exception for all domain-level errors
    inside the flight booking service.
    """


class NotFoundError(FlightBookingError):
    """Raised when a referenced flight, user, admin or booking is absent."""


class ConflictError(FlightBookingError):
    """Raised when a write would break a uniqueness rule."""


class UnauthorizedError(FlightBookingError):
    """Raised when an admin credential is missing or cannot be decoded."""


class ForbiddenError(FlightBookingError):
    """Raised when an admin lacks the permission an action requires."""


class PaymentGatewayError(FlightBookingError):
    """Raised when the payment provider refuses or fails an order call."""


class SignatureMismatchError(FlightBookingError):
    """Raised when a payment confirmation signature does not verify."""


class PersistenceError(FlightBookingError):
    """Raised when a unit of work could not be committed."""


class ConfigurationError(FlightBookingError):
    """Raised when a required server setting is missing."""


class InvalidStateTransitionError(FlightBookingError):
    """
    Raised when an illegal booking state transition is attempted.
    """

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)
