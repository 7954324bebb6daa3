"""
Base Service Interface

All services inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can check its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Validated input conforming to InputT schema

        Returns:
            Output conforming to OutputT schema

        Raises:
            ServiceError: If execution fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if service is healthy and can process requests."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ExternalAPIError(ServiceError):
    """External API call failed."""
    pass


class ConfigurationError(ServiceError):
    """A required setting (usually an API key) is missing."""
    pass


class GenerationError(ServiceError):
    """
    Text generation failed for one or more timeframes.

    ``failures`` maps each failed timeframe to its error message.
    """

    def __init__(
        self,
        service_name: str,
        message: str,
        failures: Optional[dict[str, str]] = None,
    ):
        self.failures = failures or {}
        super().__init__(service_name, message, details={"failures": self.failures})


class AnalysisTimeoutError(ServiceError):
    """The shared generation window elapsed and no stale result was available."""

    USER_MESSAGE = "Analysis request timed out. Please try again."

    def __init__(self, service_name: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            service_name,
            self.USER_MESSAGE,
            details={"timeout_seconds": timeout_seconds},
        )
