"""Domain layer DI providers."""

from dishka import Scope, provide

from threadkit.config import CommentSettings
from threadkit.domain.repository import CommentStore
from threadkit.domain.service import CommentService
from threadkit.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with the store/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_comment_service(
        self, comment_store: CommentStore, settings: CommentSettings
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(comment_store=comment_store, settings=settings)
