"""Import all models so Base.metadata sees every table."""
from telemed_realtime.infrastructure.db.models.appointment import AppointmentModel
from telemed_realtime.infrastructure.db.models.conversation import ConversationModel
from telemed_realtime.infrastructure.db.models.message import MessageModel
from telemed_realtime.infrastructure.db.models.notification import NotificationModel
from telemed_realtime.infrastructure.db.models.user import UserModel

__all__ = [
    "AppointmentModel",
    "ConversationModel",
    "MessageModel",
    "NotificationModel",
    "UserModel",
]
