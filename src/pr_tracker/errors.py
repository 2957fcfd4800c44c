"""Exception hierarchy for pr-tracker."""


class PRTrackerError(Exception):
    """Base class for all pr-tracker errors."""


class ConfigurationError(PRTrackerError):
    """Backend configuration is missing or unusable."""


class ValidationError(PRTrackerError):
    """Required input is missing or malformed; the operation was not attempted."""


class ValueParseError(ValidationError):
    """A record value does not match the value-with-unit grammar."""


class RecordStoreError(PRTrackerError):
    """A call into the record store failed."""


class AuthError(PRTrackerError):
    """Sign-in, sign-up or session lookup failed."""


class InvalidTransition(PRTrackerError):
    """An event is not legal in the confirmation engine's current state."""

    def __init__(self, state: object, event: object):
        self.state = state
        self.event = event
        super().__init__(
            f"{type(event).__name__} is not allowed in state {type(state).__name__}"
        )
