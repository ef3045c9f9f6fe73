"""Best-effort realtime pushes issued after a successful commit."""
from __future__ import annotations

import logging
from typing import Any

from support_chat.application.dto.principal import identity_key
from support_chat.application.ports.relay import MessageRelay
from support_chat.domain.entities.message import Message
from support_chat.domain.entities.session import SupportSession
from support_chat.domain.value_objects.enums import Role, SenderRole

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "message.created"
SESSION_UPDATED = "session.updated"


def message_payload(session: SupportSession, message: Message) -> dict[str, Any]:
    return {
        "session_id": session.session_id,
        "chat_id": str(session.id),
        "message": {
            "id": str(message.id),
            "sender": message.sender,
            "content": message.content,
            "read": message.read,
            "created_at": message.created_at.isoformat(),
        },
    }


def session_payload(session: SupportSession) -> dict[str, Any]:
    return {
        "session_id": session.session_id,
        "chat_id": str(session.id),
        "status": session.status,
        "assigned_admin_id": session.assigned_admin_id,
        "updated_at": session.updated_at.isoformat(),
    }


def counterpart_of(session: SupportSession, sender: str) -> str | None:
    """Identity key of the party that did not send, or None if nobody is there yet."""
    if sender == SenderRole.USER:
        if session.assigned_admin_id is None:
            return None
        return identity_key(Role.ADMIN, session.assigned_admin_id)
    return identity_key(Role.USER, session.owner_user_id)


async def notify(
    relay: MessageRelay,
    recipient: str | None,
    event_type: str,
    data: dict[str, Any],
) -> bool:
    if recipient is None:
        return False
    try:
        delivered = await relay.deliver(recipient, event_type, data)
    except Exception:
        logger.warning("Relay push %s to %s failed", event_type, recipient, exc_info=True)
        return False
    if not delivered:
        logger.debug("Recipient %s offline, %s left in storage", recipient, event_type)
    return delivered
