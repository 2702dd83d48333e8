# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, String, Text, DateTime, UniqueConstraint, func
from database import Base

# Per-user key/value entries mirroring the web client's local storage
# ("cart", "currentUser", "token"). Values are stored as raw JSON text.
class ClientState(Base):
    __tablename__ = "client_state"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    key = Column(String(64), nullable=False)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # One value per key for each user
        UniqueConstraint("user_id", "key", name="uq_clientstate_user_key"),
    )
