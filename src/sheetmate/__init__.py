"""SheetMate - LLM spreadsheet assistant."""

__version__ = "0.1.0"
