"""Post-commit side effects.

Audit records, notifications and bus events are queued while a decision
is prepared and run only after its transaction has committed. Each hook
fails on its own: errors are logged and never reach the caller, because
the decision they describe is already durable.
"""

import logging
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


class PostCommitHooks:
    """Ordered list of named callbacks to run after a commit."""

    def __init__(self, label: str):
        self.label = label
        self._hooks: List[Tuple[str, Callable[..., Any], tuple, dict]] = []

    def add(self, name: str, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._hooks.append((name, callback, args, kwargs))

    @property
    def names(self) -> List[str]:
        return [name for name, _, _, _ in self._hooks]

    def __len__(self) -> int:
        return len(self._hooks)

    def run(self) -> List[str]:
        """
        Execute every hook in order.

        Returns:
            Names of the hooks that failed
        """
        failed = []
        for name, callback, args, kwargs in self._hooks:
            try:
                callback(*args, **kwargs)
            except Exception:
                logger.exception("Post-commit hook %r failed for %s", name, self.label)
                failed.append(name)
        return failed
