"""Step to resolve the signed-in owner."""

from src.clients import AuthClient
from src.services.pipeline import PipelineContext, PipelineStep
from src.services.session import resolve_owner


class ResolveOwnerStep(PipelineStep):
    """Verify the session token and bind the owner identity to the context."""

    def __init__(self, auth_client: AuthClient):
        """Initialize the step.

        Args:
            auth_client: Auth service client
        """
        super().__init__("ResolveOwner")
        self.auth_client = auth_client

    async def execute(self, context: PipelineContext) -> bool:
        """Resolve the owner from the access token.

        NotAuthenticatedError propagates to ``run``, which marks the context
        unauthenticated.

        Args:
            context: Pipeline context

        Returns:
            True once the identity is set
        """
        context.identity = await resolve_owner(self.auth_client, context.access_token)
        self.logger.info("Resolved owner", report=context.report, owner_id=context.owner_id)
        return True
