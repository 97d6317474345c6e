import structlog

from payment_session.config import settings
from payment_session.domain.exceptions import StateMissingError
from payment_session.domain.models import FlowControlState, SessionContext
from payment_session.infrastructure.metrics import PAYMENT_ATTEMPTS_TOTAL


logger = structlog.get_logger()


class AttemptGovernor:
    """
    Bounded per-session payment attempt counter.

    Each call records one attempt and saturates at ``max_attempts``. Reaching the
    ceiling is a normal outcome; deciding whether to reject the payment is left
    to the caller. Calls on the same session must not run concurrently.
    """

    def __init__(self, max_attempts: int | None = None) -> None:
        self._max_attempts = max_attempts if max_attempts is not None else settings.max_payment_attempts
        if self._max_attempts < 1:
            raise ValueError("max_attempts must be a positive integer")

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def increment_and_validate(self, session: SessionContext) -> int:
        state = self._require_state(session)

        previous = state.payment_attempts or 0
        current = min(previous + 1, self._max_attempts)
        state.payment_attempts = current

        clamped = previous >= self._max_attempts
        PAYMENT_ATTEMPTS_TOTAL.labels(outcome="clamped" if clamped else "incremented").inc()
        logger.info(
            "payment_attempt_recorded",
            session_id=session.session_id,
            previous_attempts=previous,
            current_attempts=current,
            max_attempts=self._max_attempts,
        )
        if clamped:
            logger.warning(
                "payment_attempts_clamped",
                session_id=session.session_id,
                max_attempts=self._max_attempts,
            )

        return current

    def remaining_attempts(self, session: SessionContext) -> int:
        state = self._require_state(session)
        return max(0, self._max_attempts - (state.payment_attempts or 0))

    def is_exhausted(self, session: SessionContext) -> bool:
        return self.remaining_attempts(session) == 0

    def _require_state(self, session: SessionContext) -> FlowControlState:
        if session.flow_control is None:
            logger.error("flow_control_state_missing", session_id=session.session_id)
            raise StateMissingError(session.session_id)
        return session.flow_control
