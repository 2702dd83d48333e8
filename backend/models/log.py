# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Audit trail of user actions; also feeds the admin activity stream
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), index=True) # e.g. LOGIN, CART_ADD, SALE_STATUS
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True) # SUCCESS | FAIL
    ip = Column(String(64), nullable=True)

    # Free-form context of the event
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)
