from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from mall_admin.models.base import Base


# Operation log of back office users (login, create, update, delete...)
class OperationLog(Base):
    __tablename__ = "operation_logs"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True, index=True)
    operation = Column(String(50), nullable=False, index=True)  # LOGIN, CREATE, UPDATE, DELETE...
    target = Column(String(50), nullable=True, index=True)  # categories, products...
    detail = Column(Text, nullable=True)
    ip = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Acting user
    user = relationship("AdminUser", lazy="joined", uselist=False)

    @property
    def username(self):
        return self.user.username if self.user else None
