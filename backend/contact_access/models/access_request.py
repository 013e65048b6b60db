from sqlalchemy import Column, DateTime, Integer, Text, Enum, ForeignKey, Index
from contact_access.db.session import Base
from contact_access.utils.clock import utcnow

ACCESS_REQUEST_STATUSES = ("pending", "approved", "denied")

class AccessRequest(Base):
    __tablename__ = "contact_access_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(Integer, ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(Enum(*ACCESS_REQUEST_STATUSES, name="access_request_status"), default="pending", nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    # Both null while pending, both set once decided
    responded_at = Column(DateTime, nullable=True)
    responded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        Index("idx_car_unique", "contact_id", "requester_id"),
        Index("idx_car_status", "status"),
        Index("idx_car_requester", "requester_id", "created_at"),
    )

    def __repr__(self):
        return f"<AccessRequest id={self.id} contact_id={self.contact_id} requester_id={self.requester_id} status={self.status}>"
