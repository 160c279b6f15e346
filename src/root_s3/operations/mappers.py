"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

# Keyed by exception class name; subclasses inherit their parent's code
EXIT_CODES = {
    "NotFoundError": 1,
    "ConfigurationError": 2,
    "ValueError": 2,
    "TransportError": 3,
    "ConflictError": 4,
    "AccessDeniedError": 5,
    "LocalIOError": 6,
}

FALLBACK_EXIT_CODE = 3


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns:
    - 0: Success
    - 1: Bucket or object not found (NotFoundError)
    - 2: Invalid configuration or arguments (ConfigurationError, ValueError)
    - 3: Network/transport error (TransportError) or unknown error
    - 4: Conflicting backend state (ConflictError)
    - 5: Authentication or authorization failure (AccessDeniedError)
    - 6: Local file could not be read or written (LocalIOError)

    The first class along the exception's MRO with a mapping wins, so
    ConfigurationError maps to 2 rather than through ValueError or a
    generic StorageError.

    Args:
        exc: Exception to map

    Returns:
        Exit code (1-6, with 3 as fallback for unknown exceptions)
    """
    for cls in type(exc).__mro__:
        code = EXIT_CODES.get(cls.__name__)
        if code is not None:
            return code
    return FALLBACK_EXIT_CODE


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exceptions to appropriate
    exit codes using typer.Exit. The error message goes to stderr.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except (typer.Exit, typer.Abort):
        raise
    except Exception as e:
        from .printers import print_error
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
