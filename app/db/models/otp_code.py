# app/db/models/otp_code.py

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean
from app.db.session import Base

class OtpCode(Base):
    __tablename__ = "otp_codes"

    id = Column(Integer, primary_key=True, index=True)
    mobile = Column(String, index=True, nullable=False)  # не unique: хранится история кодов
    code = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)
    is_used = Column(Boolean, default=False, nullable=False)
