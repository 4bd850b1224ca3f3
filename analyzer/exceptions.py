"""
Custom exceptions for the EV log analyzer.

This module provides a hierarchy of exceptions for better error handling
and more informative error messages throughout the application.
"""


class AnalyzerError(Exception):
    """Base exception for all analyzer errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class CSVImportError(AnalyzerError):
    """CSV import operation failed."""

    def __init__(self, message: str, row_number: int = None, filename: str = None):
        details = {}
        if row_number:
            details['row_number'] = row_number
        if filename:
            details['filename'] = filename
        super().__init__(message, details)
        self.row_number = row_number
        self.filename = filename


class MissingColumnsError(CSVImportError):
    """CSV header lacks one or more required columns."""

    def __init__(self, filename: str, missing_columns: list):
        message = (
            f'File "{filename}" is missing required columns: '
            f"{', '.join(missing_columns)}"
        )
        super().__init__(message, filename=filename)
        self.missing_columns = list(missing_columns)
        self.details['missing_columns'] = self.missing_columns


class CSVTimestampParseError(CSVImportError):
    """Failed to parse timestamp in CSV row."""

    def __init__(self, message: str, row_number: int = None, raw_value: str = None):
        super().__init__(message, row_number)
        self.raw_value = raw_value
        if raw_value:
            self.details['raw_value'] = raw_value


class ConfigurationError(AnalyzerError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, config_key: str = None):
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)
        self.config_key = config_key


class AnalysisCancelledError(AnalyzerError):
    """A newer analysis run superseded the one in flight."""

    def __init__(self, message: str = "Analysis cancelled", run_id: int = None):
        details = {}
        if run_id is not None:
            details['run_id'] = run_id
        super().__init__(message, details)
        self.run_id = run_id
