from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, timezone
from core.db import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    admin_email = Column(String, nullable=False)
    resource = Column(String, nullable=False)  # categories, products, orders ...
    resource_id = Column(String, nullable=True)
    action = Column(String, nullable=False)
    timestamp = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<AuditLog {self.admin_email}: {self.action} {self.resource}#{self.resource_id}>"
