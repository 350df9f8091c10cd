from models.database import Base, get_db, init_db
from models.domain import (
    Company,
    ConversationMessage,
    ConversationProductCitation,
    Product,
)

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "Company",
    "Product",
    "ConversationMessage",
    "ConversationProductCitation",
]
