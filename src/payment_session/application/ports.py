"""Collaborator contracts consumed by the application layer."""

from collections.abc import Mapping
from typing import Protocol

from payment_session.domain.models import (
    FlowControlState,
    NotificationTopic,
    SecurityContext,
    SessionContext,
)


class SessionStore(Protocol):
    async def get_flow_control_state(self, session: SessionContext) -> FlowControlState | None: ...

    async def set_flow_control_state(self, session: SessionContext, state: FlowControlState) -> None: ...


class SecurityContextProvider(Protocol):
    def get_attribute(self, key: str) -> SecurityContext | None: ...


class NotificationChannel(Protocol):
    async def send_notification(
        self,
        payload: Mapping[str, str],
        recipient_id: str,
        topic: NotificationTopic,
        security_context: SecurityContext | None,
    ) -> None:
        """Deliver one notification. Raises ChannelDispatchError on transport failure."""
        ...
