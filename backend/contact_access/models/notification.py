from sqlalchemy import Column, String, DateTime, Integer, Text, Boolean, Enum, ForeignKey, Index
from contact_access.db.session import Base
from contact_access.utils.clock import utcnow

NOTIFICATION_TYPES = (
    "contact_access_request",
    "contact_access_approved",
    "contact_access_denied",
)

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False)  # recipient
    type = Column(Enum(*NOTIFICATION_TYPES, name="notification_type"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    action_url = Column(String(500), nullable=True)
    access_request_id = Column(Integer, ForeignKey('contact_access_requests.id'), nullable=True)
    contact_id = Column(Integer, ForeignKey('contacts.id', ondelete="SET NULL"), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    read_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_notif_user_unread", "user_id", "is_read"),
    )
