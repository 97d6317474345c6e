import structlog

from payment_session.config import settings
from payment_session.domain.models import FlowControlState, SessionContext
from payment_session.infrastructure.redis_client import RedisClient


logger = structlog.get_logger()

# Marks a stored state that exists but holds no counter yet.
EMPTY_STATE_MARKER = "__empty__"


class RedisSessionStore:
    """
    Flow-control state persisted as a Redis hash per session.

    The hash lives under ``{key_prefix}{session_id}:flow`` and expires after
    ``ttl_seconds`` of inactivity; every write refreshes the expiry.
    """

    def __init__(
        self,
        redis_client: RedisClient,
        key_prefix: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix or settings.session_key_prefix
        self._ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    def key_for(self, session: SessionContext) -> str:
        return f"{self._key_prefix}{session.session_id}:flow"

    async def get_flow_control_state(self, session: SessionContext) -> FlowControlState | None:
        stored: dict[str, str] = await self._redis.client.hgetall(self.key_for(session))
        if not stored:
            return None
        return FlowControlState.from_mapping(stored)

    async def set_flow_control_state(self, session: SessionContext, state: FlowControlState) -> None:
        key = self.key_for(session)
        mapping = state.to_mapping() or {EMPTY_STATE_MARKER: "1"}

        pipe = self._redis.client.pipeline()
        pipe.delete(key)
        pipe.hset(key, mapping=mapping)
        pipe.expire(key, self._ttl_seconds)
        await pipe.execute()

        logger.debug(
            "flow_control_state_saved",
            session_id=session.session_id,
            payment_attempts=state.payment_attempts,
        )

    async def load_into(self, session: SessionContext) -> FlowControlState | None:
        """Attach the stored state to ``session`` and return it."""
        state = await self.get_flow_control_state(session)
        session.flow_control = state
        return state
