"""Main entry point for the study-quiz CLI."""

from study_quiz.cli.app import app


def main():
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    main()
