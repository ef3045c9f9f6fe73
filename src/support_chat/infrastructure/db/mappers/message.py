from __future__ import annotations

from support_chat.domain.entities.message import Message
from support_chat.infrastructure.db.models.message import SessionMessageModel


def model_to_entity(model: SessionMessageModel) -> Message:
    return Message(
        id=model.id,
        session_pk=model.session_pk,
        sender=model.sender,
        content=model.content,
        read=model.read,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> SessionMessageModel:
    return SessionMessageModel(
        id=entity.id,
        session_pk=entity.session_pk,
        sender=entity.sender,
        content=entity.content,
        read=entity.read,
        created_at=entity.created_at,
    )
