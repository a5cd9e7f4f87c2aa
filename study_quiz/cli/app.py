"""Typer CLI application for studying with generated and loaded quizzes."""

import itertools
import random
import time
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

from study_quiz.agents.coordinator import analyze_results, mode_title
from study_quiz.agents.generator import generate_questions
from study_quiz.agents.llm import get_chat_model
from study_quiz.agents.planner import ALL_DIFFICULTIES, effective_settings, review_settings
from study_quiz.bank.loader import load_question_banks, practice_settings_for
from study_quiz.bank.selector import build_assessment
from study_quiz.config.logging import configure_logging
from study_quiz.config.settings import get_settings
from study_quiz.curriculum.topic_tree import TopicTree, get_curriculum_tree
from study_quiz.export.docx_generator import (
    export_results_to_docx,
    format_duration,
    generate_timestamped_filename,
)
from study_quiz.graph.state import (
    QuizState,
    create_initial_state,
    end_quiz,
    lightning_bonus,
    start_quiz,
    submit_answer,
    time_limit,
    to_history_item,
    toggle_review_question,
)
from study_quiz.graph.workflow import run_generation
from study_quiz.models.errors import QuizError, QuizValidationError
from study_quiz.models.quiz import (
    CourseTopic,
    Difficulty,
    GenerationRequest,
    PerformanceReport,
    Question,
    QuizMode,
    QuizSettings,
)
from study_quiz.storage.history import HistoryStore

app = typer.Typer(
    name="study-quiz",
    help="AI-powered study quizzes over the IFRS FSA Level 1 curriculum",
    add_completion=False,
)

console = Console()

LETTERS = "ABCDEF"
STYLE_EXAMPLE_COUNT = 3
FLAG_INPUT = "?"


def get_history_store() -> HistoryStore:
    settings = get_settings()
    return HistoryStore(settings.history_path, settings.max_history_items)


def fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}", style="bold")
    raise typer.Exit(code=1)


def resolve_topic(tree: TopicTree, value: str) -> str:
    """Accept either a topic title or its outline id."""
    if value in tree:
        return value
    for title in tree.all_titles():
        if tree.find(title).id == value:
            return title
    raise typer.BadParameter(f"Unknown topic: {value!r}. Run 'topics' to list them.")


@app.command()
def topics() -> None:
    """Show the curriculum outline with the ids accepted by --topic."""
    tree = get_curriculum_tree()
    root = Tree("[bold cyan]IFRS FSA Level 1 Curriculum[/bold cyan]")

    def add_branch(branch: Tree, topic: CourseTopic) -> None:
        label = f"[dim]{topic.id}[/dim]  {topic.title}"
        if topic.is_leaf:
            branch.add(label)
            return
        child = branch.add(f"[bold]{label}[/bold]")
        for sub_topic in topic.sub_topics:
            add_branch(child, sub_topic)

    for part in tree.roots:
        add_branch(root, part)
    console.print(root)


@app.command("generate-one")
def generate_one(
    topic: str = typer.Argument(..., help="Leaf topic id or title, e.g. 11.1"),
    difficulty: Difficulty = typer.Option(
        Difficulty.MEDIUM,
        "--difficulty",
        "-d",
        help="Difficulty level",
        case_sensitive=False,
    ),
    align: bool = typer.Option(
        True,
        "--align/--no-align",
        help="Follow the official exam question style",
    ),
) -> None:
    """
    Generate a single question and show it with its answer.

    Example:
        study-quiz generate-one 11.1 -d hard
    """
    tree = get_curriculum_tree()
    title = resolve_topic(tree, topic)
    request = GenerationRequest(
        topic=title, difficulty=difficulty, count=1, align_with_exam=align
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            progress.add_task("[cyan]Generating question...", total=None)
            questions = generate_questions(request, get_chat_model(), itertools.count())
    except QuizError as e:
        fail(e)

    question = questions[0]
    display_question(question, 1, 1)
    console.print(f"[green]Answer:[/green] {escape(', '.join(question.correct_answers))}")
    if question.explanation:
        console.print(f"[dim]{escape(question.explanation)}[/dim]")


@app.command()
def quiz(
    mode: QuizMode = typer.Option(
        QuizMode.PRACTICE,
        "--mode",
        "-m",
        help="practice, lightning, timed (full simulator) or timed_half",
        case_sensitive=False,
    ),
    topic: Optional[List[str]] = typer.Option(
        None,
        "--topic",
        "-t",
        help="Topic id or title (can specify multiple times: -t 1 -t 11.2)",
    ),
    difficulty: Optional[List[Difficulty]] = typer.Option(
        None,
        "--difficulty",
        "-d",
        help="Difficulty levels (can specify multiple times)",
        case_sensitive=False,
    ),
    questions: int = typer.Option(
        10,
        "--questions",
        "-q",
        help="Number of questions (ignored by the simulators)",
        min=1,
        max=100,
    ),
    align: bool = typer.Option(
        True,
        "--align/--no-align",
        help="Follow the official exam question style",
    ),
    examples: Optional[Path] = typer.Option(
        None,
        "--examples",
        help="Question-bank file whose questions ground the generated style",
        exists=True,
        dir_okay=False,
    ),
    review_docx: Optional[Path] = typer.Option(
        None,
        "--review-docx",
        help="Write the results review to this DOCX file",
    ),
) -> None:
    """
    Generate a quiz with AI and take it in the terminal.

    Example:
        study-quiz quiz -t 11 -t 12.1 -d easy -d hard -q 15
    """
    if mode is QuizMode.ASSESSMENT:
        fail(QuizValidationError("Assessments are built from files: use the 'assessment' command."))

    tree = get_curriculum_tree()
    selection: frozenset[str] = frozenset()
    for value in topic or []:
        selection = tree.toggle(selection, resolve_topic(tree, value), True)

    settings = QuizSettings(
        topics=[t for t in tree.all_titles() if t in selection],
        difficulty=[d for d in ALL_DIFFICULTIES if d in set(difficulty or [Difficulty.MEDIUM])],
        number_of_questions=questions,
        mode=mode,
    )

    try:
        style_examples = []
        if examples is not None:
            pool = load_question_banks([examples])
            style_examples = random.sample(pool, min(STYLE_EXAMPLE_COUNT, len(pool)))
        run_generated_quiz(effective_settings(settings, tree), align, style_examples, review_docx)
    except QuizError as e:
        fail(e)


@app.command()
def assessment(
    files: List[Path] = typer.Argument(
        ..., help="Question-bank JSON files", exists=True, dir_okay=False
    ),
    review_docx: Optional[Path] = typer.Option(
        None,
        "--review-docx",
        help="Write the results review to this DOCX file",
    ),
) -> None:
    """Take an assessment drawn from question-bank files by curriculum part."""
    try:
        pool = load_question_banks(files)
        settings, selected = build_assessment(pool)
    except QuizError as e:
        fail(e)

    console.print(f"[cyan]Loaded {len(pool)} questions, selected {len(selected)}.[/cyan]")
    report = finish_run(settings, take_quiz(settings, selected), review_docx)
    try:
        offer_review(report, align=True, style_examples=[])
    except QuizError as e:
        fail(e)


@app.command()
def load(
    files: List[Path] = typer.Argument(
        ..., help="Question-bank JSON files", exists=True, dir_okay=False
    ),
    review_docx: Optional[Path] = typer.Option(
        None,
        "--review-docx",
        help="Write the results review to this DOCX file",
    ),
) -> None:
    """Practice every question of one or more question-bank files."""
    try:
        pool = load_question_banks(files)
    except QuizError as e:
        fail(e)

    settings = practice_settings_for(pool)
    console.print(f"[cyan]Loaded {len(pool)} questions.[/cyan]")
    report = finish_run(settings, take_quiz(settings, pool), review_docx)
    try:
        offer_review(report, align=True, style_examples=[])
    except QuizError as e:
        fail(e)


@app.command()
def history() -> None:
    """List completed runs, most recent first."""
    items = get_history_store().load()
    if not items:
        console.print("[yellow]No quizzes taken yet.[/yellow]")
        return

    table = Table(title="Quiz History", border_style="cyan")
    table.add_column("#", style="cyan")
    table.add_column("Date", style="white")
    table.add_column("Mode", style="white")
    table.add_column("Topics", style="white", max_width=40)
    table.add_column("Score", style="white")
    table.add_column("Time", style="white")

    for index, item in enumerate(items, 1):
        score = f"{item.correct_count}/{len(item.results)} ({item.score_percentage}%)"
        table.add_row(
            str(index),
            item.date[:16].replace("T", " "),
            mode_title(item.settings.mode),
            ", ".join(item.settings.topics) or "-",
            color_score(score, item.score_percentage),
            format_duration(item.time_taken) if item.time_taken is not None else "-",
        )
    console.print(table)


@app.command("history-delete")
def history_delete(
    index: int = typer.Argument(..., help="Position shown by the history command", min=1),
) -> None:
    """Delete one run from the history."""
    try:
        get_history_store().delete(index - 1)
    except IndexError as e:
        fail(e)
    console.print(f"[green]✓[/green] Deleted history entry {index}.")


@app.command("history-clear")
def history_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the whole history."""
    if not yes and not typer.confirm("Delete all quiz history?", default=False):
        raise typer.Exit()
    get_history_store().clear()
    console.print("[green]✓[/green] History cleared.")


@app.command()
def info() -> None:
    """Display information about the study quiz tool."""
    settings = get_settings()
    info_text = f"""
[bold cyan]Study Quiz[/bold cyan]
Version: 0.1.0

[bold]Modes:[/bold]
  • Practice - Chosen topics, feedback after every answer
  • Lightning - Short countdown that earns bonus time with every answer
  • Full Simulator - {settings.timed_question_count} questions over the whole curriculum
  • 1/2 Simulator - {settings.half_timed_question_count} questions over the whole curriculum
  • Assessment - {settings.assessment_question_count} questions drawn from your files by part

[bold]Pipeline:[/bold]
  • Planner - Spreads questions over the selected leaf topics
  • Generator - Requests questions from the model, one topic at a time
  • Validator - Rejects replies that break the question contract
  • Coordinator - Scores the run and finds weak topics

[bold]Model:[/bold] {settings.model_name} ({settings.llm_provider})
[bold]History:[/bold] {settings.history_path}
    """
    console.print(Panel(info_text, title="Study Quiz Info", border_style="cyan"))


def run_generated_quiz(
    settings: QuizSettings,
    align: bool,
    style_examples: list[Question],
    review_docx: Optional[Path],
) -> None:
    """Generate, take and review a run."""
    display_config(settings, align)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]Generating your custom quiz...", total=None)
        generated, errors = run_generation(
            settings, align_with_exam=align, examples=style_examples
        )
        progress.update(task, description="[green]Quiz generation complete!")

    for message in errors:
        console.print(f"[yellow]Skipped:[/yellow] {message}")
    if len(generated) < settings.number_of_questions:
        console.print(
            f"[yellow]Only {len(generated)} of {settings.number_of_questions} "
            "questions could be generated.[/yellow]"
        )

    report = finish_run(settings, take_quiz(settings, generated), review_docx)
    offer_review(report, align, style_examples)


def offer_review(
    report: PerformanceReport, align: bool, style_examples: list[Question]
) -> None:
    """Offer a generated practice round on weak topics found in the curriculum."""
    tree = get_curriculum_tree()
    if not tree.leaf_filter(tree.expand_weak_topics(report.weak_topics)):
        return
    if typer.confirm("Start a review round on your weak topics?", default=False):
        run_generated_quiz(review_settings(report.weak_topics, tree), align, style_examples, None)


def take_quiz(settings: QuizSettings, questions: list[Question]) -> QuizState:
    """
    Ask every question in turn and record the answers.

    Timed modes stop asking once the countdown runs out; an answer typed
    after the deadline is discarded. Lightning adds its bonus after each answer.

    Returns:
        The finished session state
    """
    state = start_quiz(create_initial_state(), settings, questions)
    limit = time_limit(settings, len(questions))
    bonus = lightning_bonus(settings)
    started = time.monotonic()
    deadline = started + limit if limit is not None else None

    console.print(f"\n[bold red]{mode_title(settings.mode)}[/bold red]")
    for number, question in enumerate(questions, 1):
        if deadline is not None and time.monotonic() >= deadline:
            console.print("[red]Time's up![/red]")
            break

        display_question(question, number, len(questions), deadline)
        asked_at = time.monotonic()
        answer = prompt_answer(state, question)

        if deadline is not None and time.monotonic() >= deadline:
            console.print("[red]Time's up![/red]")
            break

        result = submit_answer(state, question, answer, time.monotonic() - asked_at)
        if deadline is not None:
            deadline += bonus
        if settings.mode is QuizMode.PRACTICE:
            display_feedback(question, result.is_correct)

    elapsed = time.monotonic() - started
    if settings.mode is QuizMode.PRACTICE:
        end_quiz(state, elapsed)
    elif settings.mode.is_simulator:
        end_quiz(state, min(elapsed, limit))
    else:
        end_quiz(state)
    return state


def prompt_answer(state: QuizState, question: Question) -> list[str]:
    """Read option letters until they form a valid answer; '?' flags the question."""
    hint = "letters, e.g. A,C" if question.is_multiple_choice else "one letter"
    while True:
        raw = typer.prompt(f"Your answer ({hint}, {FLAG_INPUT} to flag)")
        if raw.strip() == FLAG_INPUT:
            toggle_review_question(state, question.id)
            flagged = question.id in state["reviewed_questions"]
            console.print("[magenta]Flagged for review.[/magenta]" if flagged else "Flag removed.")
            continue
        answer = parse_answer(raw, question)
        if answer is None:
            console.print(f"[yellow]Please enter {hint} from the options shown.[/yellow]")
            continue
        return answer


def parse_answer(raw: str, question: Question) -> list[str] | None:
    """
    Map typed letters to option texts.

    Returns:
        Selected options in the order typed, or None if the input is invalid
    """
    valid = LETTERS[: len(question.options)]
    letters = list(dict.fromkeys(c for c in raw.upper() if not c.isspace() and c != ","))
    if not letters or any(letter not in valid for letter in letters):
        return None
    if not question.is_multiple_choice and len(letters) != 1:
        return None
    return [question.options[valid.index(letter)] for letter in letters]


def finish_run(
    settings: QuizSettings, state: QuizState, review_docx: Optional[Path]
) -> PerformanceReport:
    """Show the review, save the run to history and optionally export it."""
    report = analyze_results(state["results"], total_questions=len(state["questions"]))
    display_report(report, state)

    get_history_store().save(to_history_item(state))

    if review_docx is not None:
        if review_docx.is_dir():
            filename = generate_timestamped_filename(f"{settings.mode.value}_review")
            review_docx = review_docx / filename
        output_file = export_results_to_docx(
            settings,
            state["results"],
            review_docx,
            state["time_taken"],
            total_questions=len(state["questions"]),
        )
        console.print(f"\n[green]✓[/green] Review exported to: {output_file}")
    return report


def display_config(settings: QuizSettings, align: bool) -> None:
    """Display the configuration before generation."""
    table = Table(title="Quiz Configuration", show_header=False, border_style="cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Mode", mode_title(settings.mode))
    table.add_row("Topics", str(len(settings.topics)))
    table.add_row("Difficulty", ", ".join(d.value.capitalize() for d in settings.difficulty))
    table.add_row("Questions", str(settings.number_of_questions))
    table.add_row("Exam style", "Yes" if align else "No")

    console.print()
    console.print(table)


def display_question(
    question: Question, number: int, total: int, deadline: float | None = None
) -> None:
    lines = [escape(question.question), ""]
    for letter, option in zip(LETTERS, question.options):
        lines.append(f"  [bold]{letter}.[/bold] {escape(option)}")
    if question.is_multiple_choice:
        lines.append("\n[italic]Select all that apply.[/italic]")

    subtitle = question.topic
    if deadline is not None:
        subtitle += f"  |  {format_duration(max(0.0, deadline - time.monotonic()))} left"
    console.print(
        Panel("\n".join(lines), title=f"Question {number} / {total}", subtitle=subtitle)
    )


def display_feedback(question: Question, is_correct: bool) -> None:
    if is_correct:
        console.print("[green]✓ Correct![/green]")
    else:
        console.print(f"[red]✗ Incorrect.[/red] Answer: {escape(', '.join(question.correct_answers))}")
    if question.explanation:
        console.print(f"[dim]{escape(question.explanation)}[/dim]")


def color_score(text: str, percentage: int) -> str:
    if percentage >= 70:
        return f"[green]{text}[/green]"
    if percentage >= 50:
        return f"[yellow]{text}[/yellow]"
    return f"[red]{text}[/red]"


def display_report(report: PerformanceReport, state: QuizState) -> None:
    """Display the results review of a finished run."""
    console.print("\n[bold green]Quiz Complete![/bold green]")

    table = Table(title="Results", border_style="green")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    score = f"{report.correct_count}/{report.total_count} ({report.percentage}%)"
    table.add_row("Score", color_score(score, report.percentage))
    if state["time_taken"] is not None:
        table.add_row("Time", format_duration(state["time_taken"]))
    for kind, stats in report.question_type_stats.items():
        if stats.total:
            table.add_row(f"{kind.capitalize()} answer", f"{stats.correct}/{stats.total}")
    console.print()
    console.print(table)
    console.print(f"[italic]{report.feedback}[/italic]")

    if report.topic_stats:
        topic_table = Table(title="Performance by Topic", border_style="cyan")
        topic_table.add_column("Topic", style="white")
        topic_table.add_column("Correct", style="white")
        topic_table.add_column("Accuracy", style="white")
        for topic, stats in report.topic_stats.items():
            topic_table.add_row(topic, f"{stats.correct}/{stats.total}", f"{stats.accuracy:.0%}")
        console.print()
        console.print(topic_table)

    if report.weak_topics:
        console.print("\n[bold yellow]Topics to review:[/bold yellow]")
        for topic in report.weak_topics:
            console.print(f"  • {topic}")

    flagged = [q for q in state["questions"] if q.id in state["reviewed_questions"]]
    if flagged:
        console.print("\n[bold magenta]Flagged for review:[/bold magenta]")
        for question in flagged:
            console.print(f"  • {question.question}")


@app.callback()
def callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """
    Study Quiz - Practice for the IFRS FSA Level 1 exam with AI-generated questions.
    """
    settings = get_settings()
    configure_logging(log_level or settings.log_level, settings.json_logs)


if __name__ == "__main__":
    app()
