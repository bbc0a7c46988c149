"""Base class for report pipeline steps."""

from abc import ABC, abstractmethod

from structlog import get_logger

from src.clients import NotAuthenticatedError, StoreAuthenticationError

logger = get_logger(__name__)


class PipelineStep(ABC):
    """A unit of report work: read from the context, fetch or derive, write back.

    Subclasses implement ``execute`` and return whether the step succeeded.
    Exceptions never escape ``run``; they are recorded on the context.
    """

    def __init__(self, name: str | None = None):
        """Initialize the pipeline step.

        Args:
            name: Optional custom name for the step. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: "PipelineContext") -> bool:
        """Do the step's work against the context.

        Returns:
            True if step succeeded, False if failed
        """

    async def run(self, context: "PipelineContext") -> bool:
        """Run the step, logging and recording its outcome.

        An authentication failure from any client marks the context
        unauthenticated so it is never reported as an empty result.
        """
        log = self.logger.bind(report=context.report, owner_id=context.owner_id)
        log.debug("Step starting")

        try:
            success = await self.execute(context)
        except (NotAuthenticatedError, StoreAuthenticationError) as e:
            log.warning("Step rejected: not authenticated", error=str(e))
            context.unauthenticated = True
            context.add_error(self.name, str(e))
            return False
        except Exception as e:
            log.error("Step failed with exception", error=str(e), exc_info=True)
            context.add_error(self.name, str(e))
            return False

        if success:
            log.info("Step completed")
        else:
            log.warning("Step reported failure")
            if not any(error["step"] == self.name for error in context.errors):
                context.add_error(self.name, "Step reported failure")
        return success

    def is_required(self) -> bool:
        """Whether a failure of this step fails the whole report."""
        return True

    def get_name(self) -> str:
        return self.name
