from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from support_chat.application.dto.principal import Principal
from support_chat.application.exceptions import ValidationError
from support_chat.application.policies import lifecycle
from support_chat.application.ports.relay import MessageRelay
from support_chat.application.uow import UnitOfWork
from support_chat.domain.entities.message import Message
from support_chat.services.notifications import (
    MESSAGE_CREATED,
    counterpart_of,
    message_payload,
    notify,
)
from support_chat.services.session_service import load_session, require_session_id

logger = logging.getLogger(__name__)


async def append_message(
    session_id: str,
    principal: Principal,
    content: str | None,
    relay: MessageRelay,
    uow: UnitOfWork,
) -> Message:
    """Append a message and push it to the other party if they are online.

    An admin reply claims the session (``claim_and_activate``); a user
    message activates a waiting session. Closed sessions are rejected.
    """
    require_session_id(session_id)
    if not isinstance(content, str) or not content.strip():
        raise ValidationError("Message content is required")

    session = await load_session(session_id, principal, uow)

    now = datetime.now(timezone.utc)
    if principal.is_admin:
        updated = lifecycle.claim_and_activate(session, principal.subject_id, now)
    else:
        updated = lifecycle.activate_on_message(session, now)

    msg = Message(
        id=uuid.uuid4(),
        session_pk=session.id,
        sender=principal.role.value,
        content=content,
        read=False,
        created_at=now,
    )
    msg = await uow.messages_w.append(msg)
    await uow.sessions_w.save_state(updated)
    await uow.commit()

    await notify(
        relay,
        counterpart_of(updated, msg.sender),
        MESSAGE_CREATED,
        message_payload(updated, msg),
    )
    return msg


async def mark_read(
    session_id: str,
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    session = await load_session(session_id, principal, uow)
    changed = await uow.messages_w.mark_read(session.id, principal.role)
    await uow.commit()
    return changed


async def count_unread(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.sessions.count_unread(principal.role, principal.subject_id)
