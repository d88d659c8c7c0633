from datetime import datetime

from sqlalchemy import Column, String, Text, DateTime

from adstudio.database import Base


class Secret(Base):
    __tablename__ = "secrets"

    key = Column(String, primary_key=True)  # e.g. OPENAI_API_KEY
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
