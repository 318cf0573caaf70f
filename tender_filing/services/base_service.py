from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from tender_filing.core.exceptions import ErrorCode, FilingError
from tender_filing.schemas.results import ActionResult
from tender_filing.utils.logging import get_logger
from tender_filing.utils.responses import action_failure

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation and error
    translation. ``execute`` never raises: every failure comes back as a
    failed ``ActionResult`` carrying an error code.
    """

    failure_code: ErrorCode = ErrorCode.UPLOAD_FAILED
    failure_message: str = "Operation failed"

    def __init__(self, session: Optional[AsyncSession] = None):
        """Initialize the service.

        Args:
            session: Database session shared by the service's repositories
        """
        self.session = session
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> ActionResult:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution
        3. Translation of exceptions into failed results

        Returns:
            ActionResult produced by ``run`` or describing the failure
        """
        try:
            self.validate(*args, **kwargs)

            return await self.run(*args, **kwargs)

        except FilingError as e:
            self.logger.warning(
                f"{self.__class__.__name__} rejected request: {str(e)}",
                extra={"error_code": e.code.value},
            )
            return action_failure(e.code, str(e))

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            if self.session is not None:
                await self.session.rollback()
            code, message = self.failure_for(*args, **kwargs)
            return action_failure(code, message)

    def failure_for(self, *args, **kwargs) -> Tuple[ErrorCode, str]:
        """Error code and message reported for an unexpected failure.

        Services exposing several actions override this to pick a code per action.
        """
        return self.failure_code, self.failure_message

    def validate(self, *args, **kwargs):
        """Validate service input.

        Override this method to implement custom validation logic.

        Raises:
            FilingError: If input is invalid
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass
