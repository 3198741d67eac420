from bookrag.boundary.db.models.conversation_model import ConversationModel
from bookrag.boundary.db.models.message_model import MessageModel
from bookrag.boundary.db.models.search_log_model import SearchLogModel

__all__ = ["ConversationModel", "MessageModel", "SearchLogModel"]
