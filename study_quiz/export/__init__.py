"""Export functionality for run reviews."""

from .docx_generator import export_results_to_docx, generate_timestamped_filename

__all__ = ["export_results_to_docx", "generate_timestamped_filename"]
