from sqlalchemy import Column, DateTime, Integer, ForeignKey, UniqueConstraint
from contact_access.db.session import Base
from contact_access.utils.clock import utcnow

class VisibilityGrant(Base):
    """Grants ``user_id`` visibility into a private contact it does not own."""
    __tablename__ = "user_contacts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'contact_id', name='unique_user_contact'),
    )

    def __repr__(self):
        return f"<VisibilityGrant user_id={self.user_id} contact_id={self.contact_id}>"
