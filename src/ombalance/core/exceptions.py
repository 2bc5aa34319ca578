"""
Custom exception hierarchy for the organic matter balance engine.
Provides clear error categories and rich error information.
"""
from typing import Optional, Any, Dict, Iterable, List
from dataclasses import dataclass


@dataclass
class ErrorContext:
    """Context information for errors"""
    field_id: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class OMBalanceError(Exception):
    """Base exception for all organic matter balance errors"""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Message with class name and context, for logs"""
        context_str = ""
        if self.context.field_id:
            context_str += f" [Field: {self.context.field_id}]"
        if self.context.component:
            context_str += f" [Component: {self.context.component}]"
        if self.context.operation:
            context_str += f" [Operation: {self.context.operation}]"

        return f"{self.__class__.__name__}: {self.message}{context_str}"


# Data-related errors
class DataError(OMBalanceError):
    """Base class for data-related errors"""
    pass


class MissingCatalogueEntryError(DataError):
    """A record references a catalogue entry that was not supplied"""

    def __init__(self, message: str, catalogue_id: str, context: Optional[ErrorContext] = None):
        super().__init__(message, context)
        self.catalogue_id = catalogue_id


class MissingSoilParameterError(DataError):
    """Required soil parameters are missing, even after estimation"""

    def __init__(self, missing: Iterable[str], context: Optional[ErrorContext] = None):
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Missing required soil parameters: {', '.join(self.missing)}", context
        )


class DataValidationError(DataError):
    """Data validation failed"""
    pass


# Calculation errors
class CalculationError(OMBalanceError):
    """Base class for calculation errors"""
    pass


class SupplyCalculationError(CalculationError):
    """Organic matter supply could not be calculated"""
    pass


class DegradationCalculationError(CalculationError):
    """Organic matter degradation could not be calculated"""
    pass


# Configuration errors
class ConfigurationError(OMBalanceError):
    """Configuration error"""
    pass


def handle_exception(exc: Exception, context: Optional[ErrorContext] = None) -> OMBalanceError:
    """
    Wrap generic exceptions in the OMBalanceError hierarchy.
    Useful for catching and categorizing third-party exceptions.
    """
    if isinstance(exc, OMBalanceError):
        # Context known at the catch site fills what the raise site left open
        if context is not None:
            own = exc.context
            exc.context = ErrorContext(
                field_id=own.field_id or context.field_id,
                component=own.component or context.component,
                operation=own.operation or context.operation,
                details=own.details or context.details,
            )
        return exc

    error_map = {
        ValueError: DataValidationError,
        KeyError: DataValidationError,
        TypeError: DataValidationError,
        ArithmeticError: CalculationError,
    }

    for exc_type, om_exc_type in error_map.items():
        if isinstance(exc, exc_type):
            return om_exc_type(str(exc), context)

    return OMBalanceError(str(exc), context)
