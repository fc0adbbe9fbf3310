from sqlalchemy import JSON, Column, Integer, Text
from questionbank.database import Base


class ProcessingJob(Base):
    __tablename__ = "processing_jobs"

    id = Column(Text, primary_key=True)
    type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    progress = Column(Integer, nullable=False, default=0)
    status_message = Column(Text)
    document_ids = Column(JSON)
    result = Column(JSON)
    error = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
