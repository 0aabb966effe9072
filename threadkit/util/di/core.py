"""Core DI providers (non-mockable)."""

from dishka import Scope, from_context, provide

from threadkit.config import CommentSettings, Settings
from threadkit.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded once by the container builder and passed in as
    container context.
    """

    settings = from_context(provides=Settings, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def provide_comment_settings(self, settings: Settings) -> CommentSettings:
        """Provide comment threading settings."""
        return settings.comments
