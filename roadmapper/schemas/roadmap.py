"""
Roadmapper: Roadmap Schemas
===========================
JSON contract for roadmap nodes. Field names on the wire are camelCase
(``timeNeeded``, ``completionTime``), attributes in Python are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Level(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class RoadmapStyle(str, Enum):
    week_by_week = "week-by-week"
    topic_wise = "topic-wise"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Node ─────────────────────────────────────────────────────────────────────

class NodePosition(BaseModel):
    """Display coordinate computed by the layout engine."""
    x: float
    y: float


class RoadmapNode(CamelModel):
    """A single topic in a learning roadmap."""
    id: str
    title: str
    description: List[str]
    children: List[str] = []
    sequence: int
    time_needed: float = Field(default=0, ge=0, description="Estimated hours")
    time_consumed: float = Field(default=0, ge=0, description="Hours spent so far")
    completed: bool = False
    completion_time: Optional[str] = None
    deadline: Optional[str] = None
    position: NodePosition


# ── Requests / Responses ─────────────────────────────────────────────────────

class GenerateRoadmapRequest(CamelModel):
    """Request body for roadmap generation."""
    prompt: str = Field(..., description="Topic the learner wants to study")
    level: Level = Field(default=Level.beginner)
    roadmap_type: RoadmapStyle = Field(default=RoadmapStyle.week_by_week)


class RoadmapResponse(BaseModel):
    status: str = "success"
    nodes: List[RoadmapNode]


class NodeUpdateRequest(BaseModel):
    """The node as currently stored, and the full node as edited in the UI."""
    current: RoadmapNode
    updated: RoadmapNode


class NodeUpdateResponse(BaseModel):
    status: str = "success"
    node: RoadmapNode
    progress: int
