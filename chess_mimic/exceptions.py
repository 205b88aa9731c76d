# chess_mimic/exceptions.py
"""
Defines custom exceptions for the ChessMimic application.

Centralizing exceptions here avoids circular dependencies when different
modules need to catch exceptions defined by other components.
"""

# --- General ---
class ChessMimicError(Exception):
    """Base class for all application-specific errors."""
    pass

# --- Configuration Errors ---
class ConfigurationError(ChessMimicError):
    """A bot configuration override could not be resolved into a valid BotConfig."""
    pass

# --- Search Oracle Errors ---
class OracleError(ChessMimicError):
    """Base class for search oracle errors."""
    pass

class OracleInitializationError(OracleError):
    """Error while starting or configuring the search oracle."""
    pass

class OracleAnalysisError(OracleError):
    """Error while the search oracle was analysing a position."""
    pass

# --- Decision Errors ---
class NoCandidatesError(ChessMimicError):
    """Raised when there is no candidate move to choose from."""
    pass

# --- Record Errors ---
class RecordError(ChessMimicError):
    """Base class for game record handling errors."""
    pass

class RecordImportError(RecordError):
    """Error encountered while reading a game record file."""
    pass

# --- Reporting Errors ---
class ReportGenerationError(ChessMimicError):
    """Base class for errors encountered during report generation."""
    pass

class CSVReportError(ReportGenerationError):
    """Specific error for CSV report generation issues."""
    pass
