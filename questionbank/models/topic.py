from sqlalchemy import Column, ForeignKey, Text
from questionbank.database import Base


class Topic(Base):
    __tablename__ = "topics"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, ForeignKey("documents.id"))
    subject = Column(Text, nullable=False)
    main_topic = Column(Text, nullable=False)
    subtopic = Column(Text)
    description = Column(Text)
    created_at = Column(Text, nullable=False)
