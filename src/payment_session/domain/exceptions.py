class DomainError(Exception):
    """Base exception for domain errors."""


class StateMissingError(DomainError):
    """Raised when a session has no flow-control state to govern."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} has no flow-control state")


class MissingBuyerInfoError(DomainError):
    """Raised when a session lacks the buyer fields a notification needs."""

    def __init__(self, session_id: str, missing: tuple[str, ...]) -> None:
        self.session_id = session_id
        self.missing = missing
        super().__init__(f"Session {session_id} is missing buyer info: {', '.join(missing)}")


class ChannelDispatchError(DomainError):
    """Raised when the notification channel fails to deliver a notification."""

    def __init__(self, topic: str, recipient_id: str, reason: str) -> None:
        self.topic = topic
        self.recipient_id = recipient_id
        self.reason = reason
        super().__init__(f"Failed to dispatch {topic} notification to {recipient_id}: {reason}")


class CurrencyMismatchError(DomainError):
    """Raised when currencies don't match."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")
