from questionbank.models.document import Document
from questionbank.models.topic import Topic
from questionbank.models.question import Question
from questionbank.models.generated_pdf import GeneratedPdf
from questionbank.models.processing_job import ProcessingJob

__all__ = ["Document", "Topic", "Question", "GeneratedPdf", "ProcessingJob"]
