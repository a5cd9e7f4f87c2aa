"""DOCX document generator for reviewing a finished run."""

from datetime import datetime
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, RGBColor

from study_quiz.agents.coordinator import analyze_results, mode_title
from study_quiz.models.quiz import Difficulty, QuizResult, QuizSettings

CORRECT_COLOR = RGBColor(0, 128, 0)
WRONG_COLOR = RGBColor(200, 0, 0)
HEADING_COLOR = RGBColor(0, 51, 102)
MUTED_COLOR = RGBColor(128, 128, 128)

DIFFICULTY_COLORS = {
    Difficulty.EASY: RGBColor(0, 128, 0),
    Difficulty.MEDIUM: RGBColor(255, 140, 0),
    Difficulty.HARD: RGBColor(255, 0, 0),
}


def ensure_output_directory(output_path: str | Path) -> Path:
    """
    Ensure the parent directory of an output file exists.

    Args:
        output_path: File path about to be written

    Returns:
        Path object for the output file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def generate_timestamped_filename(base_name: str, extension: str = "docx") -> str:
    """
    Generate a filename with timestamp.

    Args:
        base_name: Base name for the file
        extension: File extension (without dot)

    Returns:
        Filename with timestamp
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    # Clean the base name to remove any path components
    base_name = Path(base_name).name
    return f"{base_name}_{timestamp}.{extension}"


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}m {secs:02d}s"


def export_results_to_docx(
    settings: QuizSettings,
    results: list[QuizResult],
    output_path: str | Path,
    time_taken: float | None = None,
    total_questions: int | None = None,
) -> str:
    """
    Export a finished run to a formatted DOCX file.

    Args:
        settings: Settings the run was started with
        results: Answered questions in order
        output_path: Where the DOCX file should be saved
        time_taken: Elapsed seconds, if the run was timed
        total_questions: Questions in the run, so unanswered ones count as misses

    Returns:
        Path to the created DOCX file
    """
    path = ensure_output_directory(output_path)
    report = analyze_results(results, total_questions=total_questions)

    doc = Document()
    setup_document_styles(doc)

    title = doc.add_heading(f"{mode_title(settings.mode)} Review", level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    info_para = doc.add_paragraph()
    info_para.add_run(
        f"Score: {report.correct_count}/{report.total_count} ({report.percentage}%)"
    ).bold = True
    if time_taken is not None:
        info_para.add_run("  |  ")
        info_para.add_run(f"Time: {format_duration(time_taken)}").bold = True
    info_para.alignment = WD_ALIGN_PARAGRAPH.CENTER

    feedback_para = doc.add_paragraph(report.feedback)
    feedback_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    feedback_para.runs[0].italic = True

    date_para = doc.add_paragraph(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    date_para.runs[0].font.size = Pt(9)
    date_para.runs[0].font.color.rgb = MUTED_COLOR

    if report.topic_stats:
        add_topic_table(doc, report.topic_stats)

    doc.add_page_break()

    for number, result in enumerate(results, 1):
        add_result_to_document(doc, number, result)

    doc.save(str(path))
    return str(path)


def setup_document_styles(doc: Document) -> None:
    """
    Set up document-wide styles.

    Args:
        doc: Document to configure
    """
    style = doc.styles["Normal"]
    font = style.font
    font.name = "Calibri"
    font.size = Pt(11)

    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)


def add_topic_table(doc: Document, topic_stats: dict) -> None:
    """Add a per-topic breakdown table."""
    heading = doc.add_heading("Performance by Topic", level=1)
    heading.runs[0].font.color.rgb = HEADING_COLOR

    table = doc.add_table(rows=1, cols=3)
    table.style = "Light Grid Accent 1"

    header_cells = table.rows[0].cells
    header_cells[0].text = "Topic"
    header_cells[1].text = "Correct"
    header_cells[2].text = "Accuracy"
    for cell in header_cells:
        for paragraph in cell.paragraphs:
            for run in paragraph.runs:
                run.bold = True

    for topic, stats in topic_stats.items():
        row_cells = table.add_row().cells
        row_cells[0].text = topic
        row_cells[1].text = f"{stats.correct}/{stats.total}"
        row_cells[2].text = f"{stats.accuracy:.0%}"


def add_result_to_document(doc: Document, number: int, result: QuizResult) -> None:
    """
    Add one answered question to the document.

    Options chosen by the user are marked with their outcome and the correct
    options are highlighted in green.

    Args:
        doc: Document to add to
        number: 1-based position in the run
        result: The answered question
    """
    question = result.question
    correct = set(question.correct_answers)
    chosen = set(result.user_answer)

    q_para = doc.add_paragraph()
    q_run = q_para.add_run(f"Q{number}. ")
    q_run.bold = True
    q_run.font.size = Pt(12)
    q_para.add_run(question.question)

    meta_para = doc.add_paragraph()
    meta_run = meta_para.add_run(
        f"  {question.topic}  |  Difficulty: {question.difficulty.value.capitalize()}"
    )
    meta_run.font.size = Pt(9)
    meta_run.italic = True
    meta_run.font.color.rgb = DIFFICULTY_COLORS[question.difficulty]
    if question.is_multiple_choice:
        meta_para.add_run("  |  Select all that apply").font.size = Pt(9)

    for letter, option in zip("ABCDEF", question.options):
        opt_para = doc.add_paragraph(f"   {letter}. {option}")
        opt_para.paragraph_format.left_indent = Inches(0.5)
        if option in correct:
            opt_para.runs[0].bold = True
            opt_para.runs[0].font.color.rgb = CORRECT_COLOR
        if option in chosen:
            mark = " ✓ your answer" if option in correct else " ✗ your answer"
            mark_run = opt_para.add_run(mark)
            mark_run.font.color.rgb = CORRECT_COLOR if option in correct else WRONG_COLOR

    outcome_para = doc.add_paragraph()
    outcome_para.paragraph_format.left_indent = Inches(0.5)
    if not result.user_answer:
        outcome_run = outcome_para.add_run("Not answered")
        outcome_run.font.color.rgb = WRONG_COLOR
    elif result.is_correct:
        outcome_run = outcome_para.add_run("Correct")
        outcome_run.font.color.rgb = CORRECT_COLOR
    else:
        outcome_run = outcome_para.add_run("Incorrect")
        outcome_run.font.color.rgb = WRONG_COLOR
    outcome_run.bold = True

    if question.explanation:
        exp_para = doc.add_paragraph()
        exp_para.paragraph_format.left_indent = Inches(0.5)
        exp_run = exp_para.add_run(f"Explanation: {question.explanation}")
        exp_run.italic = True
        exp_run.font.size = Pt(10)
        exp_run.font.color.rgb = RGBColor(64, 64, 64)

    doc.add_paragraph()
