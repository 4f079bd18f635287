"""Error handling utilities for SecretSync."""

import sys
import traceback
from typing import Optional

import click


class SecretSyncError(Exception):
    """Base exception for SecretSync errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(SecretSyncError):
    """Raised when operator configuration is invalid or missing."""

    pass


class GenerationError(SecretSyncError):
    """Raised when secret material cannot be generated."""

    pass


class StoreError(SecretSyncError):
    """Raised when a secret cannot be read from or written to its store."""

    pass


class ConflictError(StoreError):
    """Raised when a secret was modified concurrently since it was read."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, SecretSyncError):
            self._handle_secretsync_error(error, context)
        else:
            self._handle_generic_error(error, context)

    def _handle_secretsync_error(self, error: SecretSyncError, context: Optional[str]) -> None:
        """Handle SecretSync-specific errors."""
        click.echo(f"✗ {error.message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if error.details:
            click.echo(f"Details: {error.details}", err=True)

        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Handle generic Python exceptions."""
        error_type = type(error).__name__

        if isinstance(error, FileNotFoundError):
            message = f"File not found: {error}"
            suggestions = [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error}"
            suggestions = [
                "Check file permissions",
                "Secret manifests are written with mode 0600",
            ]
        else:
            message = f"{error_type}: {error}"
            suggestions = []

        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type.

    Args:
        error_type: Type of error
        **kwargs: Additional context information

    Returns:
        list: List of suggestion strings
    """
    suggestions = {
        "configuration_invalid": [
            "Check YAML syntax in the configuration file",
            "Run 'secretsync validate-config' to list every problem",
        ],
        "window_invalid": [
            "Use English weekday names such as 'saturday'",
            "Use HH:MM for startTime and endTime, with endTime after startTime",
            "Use an IANA timezone name such as 'Europe/Berlin'",
        ],
        "generation_failed": [
            "Check the type.<field> and length.<field> annotations",
            "RSA keys need at least 1024 bits",
            "ECDSA curves are P-256, P-384 and P-521",
        ],
        "conflict": [
            "The secret changed while it was being reconciled",
            "Run the reconciliation again",
        ],
    }

    result = list(suggestions.get(error_type, []))
    field = kwargs.get("field")
    if field and error_type == "generation_failed":
        result.insert(0, f"Review the annotations for field '{field}'")
    return result


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
