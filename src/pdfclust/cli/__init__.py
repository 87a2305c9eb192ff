"""Command-line interface modules for pdfclust pipeline execution.

This package contains the execution logic; scripts/ are thin wrappers.
"""

from pdfclust.cli.run_pdf import run_pdf_pipeline

__all__ = ['run_pdf_pipeline']
