"""Route management actions to the handler that declares them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from core.errors import DispatchError

logger = logging.getLogger(__name__)

# factory(action, subject, options, context) -> object with run()
HandlerFactory = Callable[[str, Any, Dict[str, Any], Any], Any]


@dataclass(frozen=True)
class HandlerSpec:
    """A handler and the actions it declares up front."""

    name: str
    actions: FrozenSet[str]
    factory: HandlerFactory

    def supports(self, action: str) -> bool:
        return action in self.actions


class HandlerRegistry:
    """Ordered handler specs. Earlier registrations win on shared actions."""

    def __init__(self, specs: Optional[Iterable[HandlerSpec]] = None) -> None:
        self._specs: List[HandlerSpec] = []
        for spec in specs or ():
            self.register(spec)

    def register(self, spec: HandlerSpec) -> None:
        for existing in self._specs:
            shared = existing.actions & spec.actions
            if shared:
                logger.warning(
                    "Handler %s declares %s already served by %s, earlier handler wins",
                    spec.name,
                    ", ".join(sorted(shared)),
                    existing.name,
                )
        self._specs.append(spec)

    def find(self, action: str) -> Optional[HandlerSpec]:
        for spec in self._specs:
            if spec.supports(action):
                return spec
        return None

    def list_all(self) -> List[HandlerSpec]:
        return list(self._specs)


class Dispatcher:
    def __init__(self, context: Any, registry: HandlerRegistry) -> None:
        self.context = context
        self.registry = registry

    def update(self, action: str, subject: Any = None, options: Optional[Dict[str, Any]] = None) -> Any:
        """Run ``action`` on ``subject`` with the first handler that declares it.

        Raises ``DispatchError`` when no registered handler declares the action.
        """
        action = str(action)
        spec = self.registry.find(action)
        if spec is None:
            raise DispatchError(action)
        logger.debug("Dispatching %s to %s", action, spec.name)
        handler = spec.factory(action, subject, dict(options or {}), self.context)
        return handler.run()
