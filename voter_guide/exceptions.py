"""
Custom exception classes for the voter guide application.

This module defines custom exception classes for the failures that can occur
while loading lookup data and resolving a query, so that every failure can be
turned into a bounded, user-visible outcome.
"""

from typing import Optional, List, Dict, Any


class VoterGuideError(Exception):
    """Base exception class for all voter guide errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base voter guide error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class InputError(VoterGuideError):
    """Exception raised when the user query is empty or unusable."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Any = None):
        """
        Initialize input error.

        Args:
            message: Human-readable error message
            field_name: Name of the input that was rejected
            invalid_value: The rejected value
        """
        context = {
            'field_name': field_name,
            'invalid_value': str(invalid_value) if invalid_value is not None else None
        }
        super().__init__(message, error_code='INPUT_ERROR', context=context)
        self.field_name = field_name
        self.invalid_value = invalid_value


class IndexNotReadyError(VoterGuideError):
    """Exception raised when the ward index is still loading or every source was absent."""

    def __init__(self, message: str, index_name: str = 'ward_index'):
        super().__init__(message, error_code='INDEX_NOT_READY',
                         context={'index_name': index_name})
        self.index_name = index_name


class LookupMissError(VoterGuideError):
    """Exception raised when a community or address cannot be resolved."""

    def __init__(self, message: str, value: Optional[str] = None,
                 reason: str = 'community_not_found',
                 suggestions: Optional[List[str]] = None):
        """
        Initialize lookup miss error.

        Args:
            message: Human-readable error message
            value: The unresolved community or address
            reason: Which lookup step missed (community_not_found,
                address_not_found, community_undetermined)
            suggestions: Close index keys offered to the user
        """
        context = {
            'value': value,
            'reason': reason,
            'suggestions': suggestions or []
        }
        super().__init__(message, error_code='LOOKUP_MISS', context=context)
        self.value = value
        self.reason = reason
        self.suggestions = suggestions or []


class UpstreamError(VoterGuideError):
    """Exception raised for network or parse failures from external sources."""

    def __init__(self, message: str, source: Optional[str] = None,
                 status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize upstream error.

        Args:
            message: Human-readable error message
            source: URL, path or service name that failed
            status_code: HTTP status code if the failure was an HTTP response
            original_error: Original exception that caused this error
        """
        context = {
            'source': source,
            'status_code': status_code,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code='UPSTREAM_ERROR', context=context)
        self.source = source
        self.status_code = status_code
        self.original_error = original_error


class DataFormatError(VoterGuideError):
    """Exception raised when an uploaded dataset is malformed or misses required columns."""

    def __init__(self, message: str, dataset: Optional[str] = None,
                 missing_columns: Optional[List[str]] = None,
                 available_columns: Optional[List[str]] = None):
        """
        Initialize data format error.

        Args:
            message: Human-readable error message
            dataset: Kind of dataset being loaded (ward CSV, candidate CSV ...)
            missing_columns: Roles of the columns that could not be found
            available_columns: Column labels that were present
        """
        context = {
            'dataset': dataset,
            'missing_columns': missing_columns or [],
            'available_columns': available_columns or []
        }
        super().__init__(message, error_code='DATA_FORMAT_ERROR', context=context)
        self.dataset = dataset
        self.missing_columns = missing_columns or []
        self.available_columns = available_columns or []


class ConfigurationError(VoterGuideError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


# Utility functions for exception handling

def create_missing_columns_error(dataset: str, missing: List[str],
                                 available: List[str]) -> DataFormatError:
    """
    Create a standardized missing-columns error for an upload.

    Args:
        dataset: Kind of dataset being loaded
        missing: Column roles that could not be detected
        available: Column labels present in the upload

    Returns:
        DataFormatError instance
    """
    message = (
        f"Could not find {', '.join(missing)} column(s) in {dataset}. "
        f"Columns found: {', '.join(available) if available else 'none'}"
    )

    return DataFormatError(
        message=message,
        dataset=dataset,
        missing_columns=missing,
        available_columns=available
    )


def is_recoverable_error(error: Exception) -> bool:
    """
    Determine if an error is recoverable.

    Args:
        error: Exception to check

    Returns:
        True if retrying the same query later may succeed, False otherwise
    """
    # Missing credentials or bad settings will fail the same way every time
    if isinstance(error, ConfigurationError):
        return False

    return True


def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, UpstreamError):
        return 'high'
    elif isinstance(error, (DataFormatError, IndexNotReadyError)):
        return 'medium'
    elif isinstance(error, (InputError, LookupMissError)):
        return 'low'
    else:
        return 'medium'
