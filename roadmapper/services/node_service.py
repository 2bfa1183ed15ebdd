import logging
from datetime import datetime, timezone
from typing import Optional

from roadmapper.schemas.roadmap import RoadmapNode
from roadmapper.services.response_repair import EMPTY_DESCRIPTION, strip_title_prefix

logger = logging.getLogger(__name__)


def apply_node_update(current: RoadmapNode, updated: RoadmapNode, now: Optional[datetime] = None) -> RoadmapNode:
    """
    Merge an edited node into the stored one.

    Only user-editable fields are taken from ``updated``; identity, ordering,
    edges and layout stay as stored. ``completionTime`` is set when the node
    becomes completed, kept while it stays completed, cleared otherwise.
    """
    if updated.completed and not current.completed:
        completion_time = (now or datetime.now(timezone.utc)).isoformat()
    elif updated.completed:
        completion_time = current.completion_time or updated.completion_time
    else:
        completion_time = None

    description = [line for line in updated.description if line.strip()] or [EMPTY_DESCRIPTION]
    title = strip_title_prefix(updated.title.strip()) or strip_title_prefix(current.title)

    merged = current.model_copy(
        update={
            "title": f"{current.sequence}. {title}",
            "description": description,
            "time_needed": updated.time_needed,
            "time_consumed": updated.time_consumed,
            "deadline": updated.deadline or None,
            "completed": updated.completed,
            "completion_time": completion_time,
        }
    )
    logger.info(f"[NODE] Updated {current.id} (completed={merged.completed})")
    return merged


def calculate_progress(node: RoadmapNode) -> int:
    """Percent of the estimated time already spent, capped at 100."""
    if not node.time_needed:
        return 0
    return min(100, round(node.time_consumed / node.time_needed * 100))
