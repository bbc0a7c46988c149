"""Pipeline executor for report steps."""

import time

from structlog import get_logger

from .base_step import PipelineStep
from .context import PipelineContext

logger = get_logger(__name__)


class Pipeline:
    """Runs report steps in order against one shared context.

    A failed required step ends the run. A failed optional step is recorded
    and the run continues, except when the failure was an authentication
    rejection: nothing further can be read for that owner, so the run ends
    there as well.
    """

    def __init__(self, name: str, steps: list[PipelineStep]):
        """Initialize the pipeline.

        Args:
            name: Report name, used for logging
            steps: Steps to execute in order
        """
        self.name = name
        self.steps = steps
        self.logger = logger.bind(pipeline=name)

    async def execute(self, context: PipelineContext) -> PipelineContext:
        """Execute the pipeline.

        Args:
            context: Pipeline context

        Returns:
            The same context, with ``success`` and ``stats["pipeline"]`` set
        """
        self.logger.info(
            "Pipeline starting",
            report=context.report,
            generation=context.generation,
            step_count=len(self.steps),
        )

        step_results: list[dict] = []
        required_failed = False

        for step in self.steps:
            started = time.perf_counter()
            success = await step.run(context)
            step_results.append({
                "step": step.get_name(),
                "success": success,
                "required": step.is_required(),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            })

            if success:
                continue

            if step.is_required() or context.unauthenticated:
                self.logger.error(
                    "Step failed, stopping pipeline",
                    report=context.report,
                    owner_id=context.owner_id,
                    step=step.get_name(),
                    unauthenticated=context.unauthenticated,
                )
                required_failed = True
                break

            self.logger.warning(
                "Optional step failed, continuing pipeline",
                report=context.report,
                owner_id=context.owner_id,
                step=step.get_name(),
            )

        # Optional step failures degrade the report but do not fail it
        context.success = not required_failed

        failed = [r for r in step_results if not r["success"]]
        context.stats["pipeline"] = {
            "name": self.name,
            "total_steps": len(self.steps),
            "executed_steps": len(step_results),
            "successful_steps": len(step_results) - len(failed),
            "failed_steps": len(failed),
            "steps": step_results,
        }

        self.logger.info(
            "Pipeline completed",
            report=context.report,
            owner_id=context.owner_id,
            state=context.state,
            executed_steps=len(step_results),
            failed_steps=len(failed),
        )

        return context

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]
