"""
View revalidation.

Rendered views (the home page, the poll list, a poll's page) are cached by the
presentation layer. After a successful mutation the services publish the paths
whose cached rendering is now stale; whoever renders them subscribes here.
No poll or vote data is held by this module.
"""

import logging
from typing import Callable, Iterable, List, Optional

from polly.core.constants import ViewPaths

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class ViewRevalidator:
    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def revalidate(self, paths: Iterable[str]) -> None:
        for path in paths:
            logger.debug(f"Revalidating view {path}")
            for listener in list(self._listeners):
                try:
                    listener(path)
                except Exception:
                    # the mutation is already committed
                    logger.exception(f"View listener failed for {path}")

    def revalidate_poll_paths(self, poll_id: Optional[int] = None) -> None:
        """Revalidate the poll list views and, if given, the views of one poll."""
        paths = [ViewPaths.HOME, ViewPaths.POLL_LIST]
        if poll_id is not None:
            paths += [ViewPaths.poll(poll_id), ViewPaths.poll_edit(poll_id)]
        self.revalidate(paths)

    def revalidate_poll_votes(self, poll_id: int) -> None:
        self.revalidate([ViewPaths.poll(poll_id), ViewPaths.POLL_LIST])

    def revalidate_poll_comments(self, poll_id: int) -> None:
        self.revalidate([ViewPaths.poll(poll_id)])


view_revalidator = ViewRevalidator()
