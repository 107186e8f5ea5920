"""Stable item identifiers.

Items are tracked at runtime as ``namespace:path`` strings. The registry
turns persisted ids back into runtime ids and rejects ids that no longer
exist (e.g. content removed between runs).
"""

import re


DEFAULT_NAMESPACE = 'minecraft'

_NAMESPACE_RE = re.compile(r'^[a-z0-9_.-]+$')
_PATH_RE = re.compile(r'^[a-z0-9_./-]+$')


def parse_item_id(raw: str) -> str | None:
    """Normalize an id to ``namespace:path``; None if malformed.

    An id without a namespace falls back to ``minecraft``.
    """
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return None
    if ':' in text:
        namespace, _, path = text.partition(':')
    else:
        namespace, path = DEFAULT_NAMESPACE, text
    if not _NAMESPACE_RE.match(namespace) or not _PATH_RE.match(path):
        return None
    return f'{namespace}:{path}'


class ItemRegistry:
    """Resolves stable ids to runtime item handles.

    Args:
        known_ids: Ids that currently exist. None accepts every
            well-formed id.
    """

    def __init__(self, known_ids: set[str] | None = None):
        self.known_ids: set[str] | None = None
        if known_ids is not None:
            self.known_ids = {i for i in map(parse_item_id, known_ids) if i}

    def resolve(self, item_id: str) -> str | None:
        parsed = parse_item_id(item_id)
        if parsed is None:
            return None
        if self.known_ids is not None and parsed not in self.known_ids:
            return None
        return parsed

    @classmethod
    def from_file(cls, path: str) -> 'ItemRegistry':
        """Build from a newline-separated id list; '#' starts a comment."""
        ids = set()
        with open(path, encoding='utf-8') as f:
            for line in f:
                line = line.split('#', 1)[0].strip()
                if line:
                    ids.add(line)
        return cls(ids)
