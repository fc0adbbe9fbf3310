from sqlalchemy import JSON, Column, Text
from questionbank.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(Text, primary_key=True)
    filename = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    subject = Column(Text)
    content = Column(Text)
    # "metadata" is reserved on declarative classes
    doc_metadata = Column("metadata", JSON)
    processing_status = Column(Text, nullable=False, default="pending")
    created_at = Column(Text, nullable=False)
