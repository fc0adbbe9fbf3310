from sqlalchemy import JSON, Column, ForeignKey, Integer, Text
from questionbank.database import Base


class GeneratedPdf(Base):
    __tablename__ = "generated_pdfs"

    id = Column(Text, primary_key=True)
    filename = Column(Text, nullable=False)
    topic_id = Column(Text, ForeignKey("topics.id"))
    subject = Column(Text, nullable=False)
    main_topic = Column(Text, nullable=False)
    subtopic = Column(Text)
    question_count = Column(Integer, nullable=False)
    diagram_count = Column(Integer, nullable=False)
    file_size = Column(Text, nullable=False)
    file_path = Column(Text, nullable=False)
    configuration = Column(JSON)
    created_at = Column(Text, nullable=False)
