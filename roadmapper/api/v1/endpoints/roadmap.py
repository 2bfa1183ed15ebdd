import logging

from fastapi import APIRouter

from roadmapper.ai_engine import generate_roadmap
from roadmapper.schemas.roadmap import (
    GenerateRoadmapRequest,
    NodeUpdateRequest,
    NodeUpdateResponse,
    RoadmapResponse,
)
from roadmapper.services.node_service import apply_node_update, calculate_progress

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Roadmap"])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. GENERATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/roadmap/generate", response_model=RoadmapResponse)
async def create_roadmap(request: GenerateRoadmapRequest):
    """Generate a learning roadmap for a topic. Domain errors are rendered by the app handler."""
    nodes = await generate_roadmap(request.prompt, request.level, request.roadmap_type)
    return RoadmapResponse(nodes=nodes)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. NODE EDITING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/roadmap/nodes/update", response_model=NodeUpdateResponse)
async def update_node(request: NodeUpdateRequest):
    """Apply an edit from the node details panel and report progress."""
    node = apply_node_update(request.current, request.updated)
    return NodeUpdateResponse(node=node, progress=calculate_progress(node))
