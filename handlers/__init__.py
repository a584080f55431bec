"""Built-in gitolite handlers, in dispatch order."""

from core.dispatcher import HandlerRegistry
from handlers.admin import AdminHandler
from handlers.projects import ProjectHandler
from handlers.repositories import RepositoryHandler

# Order matters: the first handler declaring an action serves it.
DEFAULT_HANDLERS = [AdminHandler, RepositoryHandler, ProjectHandler]


def default_registry() -> HandlerRegistry:
    return HandlerRegistry(handler.spec() for handler in DEFAULT_HANDLERS)
