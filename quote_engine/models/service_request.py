"""ServiceRequest model: the request a quote is built for."""
from sqlalchemy import Column, String, Float
from sqlalchemy.orm import relationship
import uuid

from quote_engine.database.base import BaseModel

# Request statuses touched by the quote lifecycle
STATUS_QUOTED = "quoted"
STATUS_QUOTE_ACCEPTED = "quote_accepted"
STATUS_QUOTE_REJECTED = "quote_rejected"


class ServiceRequest(BaseModel):
    """Service request owning at most one quote."""
    __tablename__ = "service_requests"
    
    request_id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_name = Column(String(255), nullable=False, default="Project")
    client_id = Column(String(64), nullable=True, index=True)
    survey_area_sqm = Column(Float, nullable=False, default=0.0)
    status = Column(String(30), nullable=False, default="pending", index=True)
    
    quote = relationship("Quote", back_populates="request", uselist=False, cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<ServiceRequest(request_id={self.request_id}, status={self.status})>"
    
    def to_dict(self):
        return {
            "request_id": self.request_id,
            "project_name": self.project_name,
            "client_id": self.client_id,
            "survey_area_sqm": self.survey_area_sqm,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
