"""Import all models so ``Base.metadata`` sees every table."""
from support_chat.infrastructure.db.models.message import SessionMessageModel
from support_chat.infrastructure.db.models.session import SupportSessionModel

__all__ = [
    "SessionMessageModel",
    "SupportSessionModel",
]
