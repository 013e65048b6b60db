from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey
from contact_access.db.session import Base
from contact_access.utils.clock import utcnow

class AuthorizedUser(Base):
    """Email allow-list consulted when resolving session tokens."""
    __tablename__ = "authorized_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, nullable=False)
    added_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
