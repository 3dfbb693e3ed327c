"""Base class for services that talk to the document store."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from app.core.exceptions import AppError
from app.repositories.document_store import DocumentStore
from app.utils.logging import get_logger


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation and error handling.
    Business rejections come back as ``Result`` values from ``run``; only
    unexpected failures are wrapped in ``AppError``.
    """

    def __init__(self, store: Optional[DocumentStore] = None):
        """Initialize the service.

        Args:
            store: Document store collaborator used by the service
        """
        self.store = store
        self.logger = get_logger(self.__class__.__module__)

    async def execute(self, *args, **kwargs) -> Any:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution
        3. Standardized error handling

        Raises:
            AppError: If execution fails for a reason that is not a
                business outcome
        """
        try:
            self.validate(*args, **kwargs)

            return await self.run(*args, **kwargs)

        except AppError:
            raise

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e)

    def validate(self, *args, **kwargs):
        """Validate service input.

        Override this method to implement custom validation logic.
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass
