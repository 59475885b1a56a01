"""Command-line interface for CsvDiffKit."""
