"""
Common Exception Classes

This module defines the exceptions raised across TalentFlow. Structural and
validation problems are returned as values by the assessment core and never
appear here; these classes cover persistence failures and misuse of a
stateful component.
"""

from typing import Optional, Any


class BaseError(Exception):
    """Base class for all custom exceptions."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class PersistenceError(BaseError):
    """Exception raised when a document store call fails."""

    def __init__(
        self,
        message: str,
        collection: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the persistence error.

        Args:
            message: Error message
            collection: Collection the failed call targeted
            original_exception: Original storage exception
        """
        super().__init__(f"Persistence error: {message}", original_exception)
        self.collection = collection


class ConfigurationError(BaseError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key that caused the error
        """
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key


class AssessmentStateError(BaseError):
    """Exception raised when an operation is not allowed in the current state."""

    def __init__(self, message: str, state: Optional[str] = None):
        """
        Initialize the state error.

        Args:
            message: Error message
            state: Name of the state the component was in
        """
        super().__init__(message)
        self.state = state


class NotFoundError(BaseError):
    """Exception raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateError(BaseError):
    """Exception raised when attempting to create a duplicate resource."""

    def __init__(self, resource_type: str, identifier: Any):
        """
        Initialize the duplicate error.

        Args:
            resource_type: Type of resource that was duplicated
            identifier: The identifier that caused the duplicate
        """
        super().__init__(f"Duplicate {resource_type} with identifier {identifier}")
        self.resource_type = resource_type
        self.identifier = identifier
