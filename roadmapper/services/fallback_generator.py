import logging
import random
from typing import List, Optional

from roadmapper.schemas.roadmap import Level, RoadmapNode
from roadmapper.services.layout import calculate_node_position

logger = logging.getLogger(__name__)

FALLBACK_NODE_COUNTS = {
    Level.beginner: 8,
    Level.intermediate: 12,
    Level.advanced: 15,
}


def create_fallback_nodes(prompt: str, level: Level, rng: Optional[random.Random] = None) -> List[RoadmapNode]:
    """
    Placeholder roadmap for development when the AI service rejects a request.
    Each node links to the next two; the last two nodes are leaves.
    """
    rng = rng or random.Random()
    node_count = FALLBACK_NODE_COUNTS[Level(level)]
    logger.info(f"[FALLBACK] Building {node_count} placeholder nodes for '{prompt}'")

    nodes: List[RoadmapNode] = []
    for i in range(node_count):
        children = [f"node_{i + 2}", f"node_{i + 3}"] if i < node_count - 2 else []
        nodes.append(
            RoadmapNode(
                id=f"node_{i + 1}",
                title=f"{i + 1}. {prompt} Topic {i + 1}",
                description=[
                    f"Learn the basics of {prompt} concept {i + 1}",
                    "Key areas: Theory, Practice, Application",
                    f"Complete exercises related to {prompt} topic {i + 1}",
                ],
                children=children,
                sequence=i + 1,
                time_needed=rng.randint(1, 5),
                time_consumed=0,
                completed=False,
                position=calculate_node_position(i, node_count),
            )
        )
    return nodes
