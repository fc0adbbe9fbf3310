import uuid
from datetime import datetime, timezone
from pathlib import Path

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from questionbank.models.question import Question
from questionbank.models.topic import Topic
from questionbank.schemas.generated_pdf import PdfGenerationConfig
from questionbank.utils.filesystem import format_file_size, sanitize_filename

DIFFICULTY_ORDER = {"easy": 1, "medium": 2, "hard": 3}
DEFAULT_DIFFICULTY_RANK = DIFFICULTY_ORDER["medium"]

_LAYOUTS = {
    # heading, body, line height, gap between questions
    "standard": (16, 11, 6, 6),
    "compact": (13, 9, 4.5, 3),
}


def _latin1(text: str) -> str:
    """Encode to latin-1, replacing unsupported chars; fpdf built-in fonts are latin-1 only."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _difficulty_rank(question: Question) -> int:
    return DIFFICULTY_ORDER.get(question.difficulty or "medium", DEFAULT_DIFFICULTY_RANK)


def _year_value(question: Question) -> int:
    try:
        return int(question.paper_year or 0)
    except (TypeError, ValueError):
        return 0


def sort_questions(questions: list[Question], sort_by: str) -> list[Question]:
    """Stable sort; unrecognised keys (including question_type) keep the input order."""
    if sort_by == "difficulty":
        return sorted(questions, key=_difficulty_rank)
    if sort_by == "year_newest":
        return sorted(questions, key=_year_value, reverse=True)
    if sort_by == "year_oldest":
        return sorted(questions, key=_year_value)
    return list(questions)


def filter_questions(questions: list[Question], config: PdfGenerationConfig) -> list[Question]:
    # Without diagrams the whole question is dropped, not just its figure.
    if not config.include_vector_diagrams:
        return [q for q in questions if not q.has_vector_diagram]
    return list(questions)


def organize_questions(questions: list[Question], config: PdfGenerationConfig) -> list[Question]:
    return filter_questions(sort_questions(questions, config.sort_by), config)


def render_topic_pdf(topic: Topic, questions: list[Question], config: PdfGenerationConfig) -> bytes:
    heading_size, body_size, line_height, gap = _LAYOUTS[config.layout]

    pdf = FPDF()
    pdf.set_margins(20, 20, 20)
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()

    header = f"O-Level {(topic.subject or '').upper()} - {topic.main_topic}"
    subtitle = f"Subtopic: {topic.subtopic}" if topic.subtopic else "All Subtopics"
    generated_on = datetime.now(timezone.utc).strftime("%Y-%m-%d")

    pdf.set_font("Helvetica", "B", heading_size)
    pdf.multi_cell(0, line_height + 4, _latin1(header), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "", body_size)
    pdf.set_text_color(80, 80, 80)
    for line in (subtitle, f"Generated on: {generated_on}", f"Total Questions: {len(questions)}"):
        pdf.cell(0, line_height, _latin1(line), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(2)
    pdf.set_draw_color(200, 200, 200)
    pdf.line(20, pdf.get_y(), 190, pdf.get_y())
    pdf.ln(gap)

    for index, question in enumerate(questions, start=1):
        pdf.set_text_color(0, 0, 0)
        pdf.set_font("Helvetica", "B", body_size)
        label = f"Question {index}"
        if question.question_number:
            label += f" (Q{question.question_number})"
        pdf.cell(0, line_height, _latin1(label), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        pdf.set_font("Helvetica", "", body_size)
        if config.include_question_text:
            pdf.multi_cell(0, line_height, _latin1(question.question_text or ""),
                           new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        pdf.set_text_color(80, 80, 80)
        if config.include_source_info and question.paper_year:
            source = f"Source: {question.paper_year} {question.paper_session or ''} Paper"
            pdf.cell(0, line_height, _latin1(" ".join(source.split())),
                     new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if question.marks:
            pdf.cell(0, line_height, f"Marks: {question.marks}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if question.has_vector_diagram and config.include_vector_diagrams:
            pdf.set_text_color(180, 60, 0)
            pdf.cell(0, line_height, "[Vector Diagram Included]", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        pdf.ln(gap)

    return bytes(pdf.output())


def generate_topic_pdf(
    topic: Topic,
    questions: list[Question],
    config: PdfGenerationConfig,
    output_dir: Path,
) -> dict:
    """Render and write the PDF. Questions must already be organized."""
    pdf_bytes = render_topic_pdf(topic, questions, config)

    date_stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    filename = f"{sanitize_filename(topic.main_topic)}_{date_stamp}_{uuid.uuid4().hex[:8]}.pdf"
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / filename
    file_path.write_bytes(pdf_bytes)

    return {
        "filename": filename,
        "filePath": str(file_path),
        "fileSize": format_file_size(len(pdf_bytes)),
        "questionCount": len(questions),
        "diagramCount": sum(1 for q in questions if q.has_vector_diagram),
    }
