from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Text
from questionbank.database import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Text, primary_key=True)
    document_id = Column(Text, ForeignKey("documents.id"))
    topic_id = Column(Text, ForeignKey("topics.id"))
    question_text = Column(Text, nullable=False)
    question_number = Column(Text)
    paper_year = Column(Text)
    paper_session = Column(Text)
    has_vector_diagram = Column(Boolean, nullable=False, default=False)
    diagram_data = Column(JSON)
    difficulty = Column(Text)
    marks = Column(Integer)
    created_at = Column(Text, nullable=False)
