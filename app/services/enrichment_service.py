"""
Priority enrichment.

Joins flat priority documents to the initiative documents they reference
so the board can render initiative chips without further lookups.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.schemas.priority import EnrichedPriority, Initiative, Priority

logger = logging.getLogger(__name__)


def initiative_ids_of(priority: Priority) -> list[str]:
    """Return the initiative references of *priority*, oldest shape included.

    Documents written before multi-initiative support carry a single
    ``initiativeId``; it is treated as a one-element list.
    """
    if priority.initiative_ids is not None:
        return list(priority.initiative_ids)
    if priority.initiative_id:
        return [priority.initiative_id]
    return []


def enrich_priorities(
    priorities: Iterable[Priority],
    initiatives: Iterable[Initiative],
) -> list[EnrichedPriority]:
    """Attach resolved ``Initiative`` objects to every priority.

    Ids with no matching initiative are dropped silently (the initiative was
    deleted or deactivated).  Order of both the priorities and each
    priority's initiative ids is preserved.

    Args:
        priorities: Priorities as returned by the gateway.
        initiatives: The full initiative list used for lookup.

    Returns:
        New ``EnrichedPriority`` instances; the inputs are not modified.
    """
    by_id = {initiative.id: initiative for initiative in initiatives}
    enriched: list[EnrichedPriority] = []
    for priority in priorities:
        ids = initiative_ids_of(priority)
        resolved = [by_id[i] for i in ids if i in by_id]
        if len(resolved) != len(ids):
            logger.debug(
                "Priority %s references %d unknown initiative(s)",
                priority.id, len(ids) - len(resolved),
            )
        enriched.append(
            EnrichedPriority.model_validate(
                {**priority.model_dump(by_alias=True), "initiatives": resolved}
            )
        )
    return enriched
