"""Remove asset references from the messages of a chat."""

from __future__ import annotations

import logging

from reclaim.db.repository import Repository
from reclaim.errors import ScrubFailed
from reclaim.purge.matcher import AssetMatcher, filter_parts

logger = logging.getLogger(__name__)


class ReferenceScrubber:
    """Rewrites message ``parts`` in place, dropping parts that reference an asset.

    Messages are never deleted; only their ``parts`` payload changes, and
    only when at least one part matched. Re-scrubbing a chat whose matching
    parts are already gone issues no writes.

    Args:
        repo: Repository over the message store.
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def scrub(self, chat_id: str, matcher: AssetMatcher) -> int:
        """Remove parts matched by *matcher* from every message of *chat_id*.

        A failed rewrite does not stop the remaining messages.

        Returns:
            Number of messages rewritten.

        Raises:
            ScrubFailed: After the pass, if the messages could not be loaded
                or any rewrite failed. Carries the modified count and the
                failed message IDs.
        """
        if matcher.is_empty:
            logger.debug("chat %s: matcher has no fields, nothing to scrub", chat_id)
            return 0

        try:
            messages = self._repo.list_messages_by_chat(chat_id)
        except Exception as exc:
            raise ScrubFailed(chat_id, [], 0, reason=f"could not load messages: {exc}") from exc

        modified = 0
        failed: list[str] = []
        for message in messages:
            parts = message.parts
            if not isinstance(parts, list):
                continue

            kept = filter_parts(parts, matcher)
            if len(kept) == len(parts):
                continue

            try:
                updated = self._repo.update_message_parts(message.id, kept)
            except Exception as exc:
                logger.warning("chat %s: could not rewrite message %s: %s", chat_id, message.id, exc)
                failed.append(message.id)
                continue
            if not updated:
                logger.debug("chat %s: message %s vanished before rewrite", chat_id, message.id)
                continue
            modified += 1
            logger.debug(
                "chat %s: message %s dropped %d part(s)", chat_id, message.id, len(parts) - len(kept)
            )

        if failed:
            raise ScrubFailed(chat_id, failed, modified)
        return modified
