from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Index
from contact_access.db.session import Base
from contact_access.utils.clock import utcnow

class Contact(Base):
    """Contact record owned by ``created_by``. Read-only for the access core."""
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_private = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_contacts_created_private", "created_by", "is_private"),
    )
