"""
Base class for gitolite management handlers
"""
from typing import Any, Dict, FrozenSet

from core.dispatcher import HandlerSpec


class GitoliteHandler:
    """One management action bound to its subject and options.

    Subclasses list their actions in ``actions``; each action is a method
    of the same name taking no arguments.
    """

    name: str = ""
    actions: FrozenSet[str] = frozenset()

    def __init__(self, action: str, subject: Any, options: Dict[str, Any], context: Any):
        self.action = action
        self.subject = subject
        self.options = options or {}
        self.context = context

    @property
    def fs(self):
        return self.context.fs

    def run(self) -> Any:
        return getattr(self, self.action)()

    @classmethod
    def spec(cls) -> HandlerSpec:
        """Registration record; every declared action must be a method."""
        missing = sorted(a for a in cls.actions if not callable(getattr(cls, a, None)))
        if missing:
            raise TypeError(f"{cls.__name__} declares actions without methods: {', '.join(missing)}")
        return HandlerSpec(name=cls.name or cls.__name__, actions=frozenset(cls.actions), factory=cls)
