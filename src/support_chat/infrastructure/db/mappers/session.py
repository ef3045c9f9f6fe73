from __future__ import annotations

from support_chat.domain.entities.session import SupportSession
from support_chat.infrastructure.db.models.session import SupportSessionModel


def model_to_entity(model: SupportSessionModel) -> SupportSession:
    return SupportSession(
        id=model.id,
        session_id=model.session_id,
        owner_user_id=model.owner_user_id,
        owner_username=model.owner_username,
        owner_email=model.owner_email,
        assigned_admin_id=model.assigned_admin_id,
        status=model.status,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: SupportSession) -> SupportSessionModel:
    return SupportSessionModel(
        id=entity.id,
        session_id=entity.session_id,
        owner_user_id=entity.owner_user_id,
        owner_username=entity.owner_username,
        owner_email=entity.owner_email,
        assigned_admin_id=entity.assigned_admin_id,
        status=entity.status,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )
