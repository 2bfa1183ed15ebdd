"""
Roadmapper: Response Repair
===========================
Turns raw model output into a list of well-formed RoadmapNodes.

  1. Parse the text as JSON, falling back to the first ``{ ... }`` span.
  2. Require a non-empty ``nodes`` array.
  3. Normalize every element; a broken element becomes a safe default node.
  4. Sort by sequence and renumber 1..N.
  5. Drop edges that dangle, repeat, point at the node itself or close a cycle.

Steps 1 and 2 raise (ParseError / FormatError). Everything after that
absorbs per-node problems so one bad element never sinks a roadmap.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Set, Tuple

from roadmapper.core.errors import FormatError, ParseError
from roadmapper.schemas.roadmap import RoadmapNode
from roadmapper.services.layout import calculate_node_position

logger = logging.getLogger(__name__)

TITLE_PREFIX = re.compile(r"^\d+\.")
TITLE_PREFIX_WITH_SPACE = re.compile(r"^\d+\.\s*")

# Greedy: first "{" to last "}". Best effort only; unrelated braces in
# surrounding prose or a truncated response still defeat it.
BRACE_SPAN = re.compile(r"\{.*\}", re.DOTALL)

EMPTY_DESCRIPTION = "No description available"
DEFAULT_DESCRIPTION = "Content to be added"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# JSON RECOVERY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def extract_json(raw_text: str) -> Any:
    """
    Parse ``raw_text`` as JSON:
    1. Whole text with json.loads
    2. Otherwise the greedy ``{ ... }`` span inside it
    Raises ParseError when neither parses.
    """
    text = (raw_text or "").strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        first_error = e
        logger.warning(f"[REPAIR] Direct JSON parse failed: {e.msg}")

    match = BRACE_SPAN.search(text)
    if not match:
        logger.error(f"[REPAIR] No JSON object in response (first 500 chars): {text[:500]}")
        raise ParseError(
            f"Failed to parse JSON response: {first_error.msg}",
            detail="Could not extract valid JSON from response",
        )

    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.error(f"[REPAIR] Extracted JSON parse failed: {e.msg}")
        raise ParseError(
            f"Failed to parse JSON response: {first_error.msg}",
            detail=f"Extracted block is not valid JSON: {e.msg}",
        ) from e


def extract_raw_nodes(parsed: Any) -> List[Any]:
    """Return the ``nodes`` array of a parsed response or raise FormatError."""
    if not isinstance(parsed, dict) or not isinstance(parsed.get("nodes"), list):
        raise FormatError("Invalid response format: missing nodes array")
    if not parsed["nodes"]:
        raise FormatError("Received empty nodes array from AI service")
    return parsed["nodes"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PER-NODE NORMALIZATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def strip_title_prefix(title: str) -> str:
    return TITLE_PREFIX_WITH_SPACE.sub("", title)


def _normalize_node(raw: Dict[str, Any], index: int, total: int, raw_ids: Set[str]) -> Tuple[float, RoadmapNode]:
    """Return ``(sort_key, node)``; raises on anything it cannot coerce."""
    node_id = raw.get("id") or f"node_{index + 1}"
    title = raw.get("title") or f"{index + 1}. Untitled Node"
    description = raw.get("description") if isinstance(raw.get("description"), list) else []
    children = raw.get("children") if isinstance(raw.get("children"), list) else []
    sequence = raw["sequence"] if _is_number(raw.get("sequence")) else index + 1
    time_needed = raw["timeNeeded"] if _is_number(raw.get("timeNeeded")) else 0

    if not TITLE_PREFIX.match(title):
        title = f"{_format_number(sequence)}. {strip_title_prefix(title.strip())}"

    if not description:
        description = [EMPTY_DESCRIPTION]

    children = [c for c in children if isinstance(c, str) and c in raw_ids]

    node = RoadmapNode(
        id=node_id,
        title=title,
        description=description,
        children=children,
        sequence=index + 1,  # renumbered after sorting
        time_needed=max(0, time_needed),
        time_consumed=0,
        completed=False,
        position=calculate_node_position(index, total),
    )
    return sequence, node


def default_node(index: int, total: int) -> RoadmapNode:
    return RoadmapNode(
        id=f"node_{index + 1}",
        title=f"{index + 1}. Topic {index + 1}",
        description=[DEFAULT_DESCRIPTION],
        children=[],
        sequence=index + 1,
        time_needed=1,
        time_consumed=0,
        completed=False,
        position=calculate_node_position(index, total),
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GRAPH SANITATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _dedupe_ids(nodes: List[RoadmapNode]) -> None:
    seen: Set[str] = set()
    for node in nodes:
        if node.id in seen:
            candidate = node.sequence
            while f"node_{candidate}" in seen:
                candidate += 1
            logger.warning(f"[REPAIR] Duplicate id '{node.id}' renamed to 'node_{candidate}'")
            node.id = f"node_{candidate}"
        seen.add(node.id)


def _reaches(graph: Dict[str, List[str]], start: str, target: str) -> bool:
    stack = [start]
    visited: Set[str] = set()
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(graph.get(current, []))
    return False


def sanitize_edges(nodes: List[RoadmapNode]) -> None:
    """
    Keep only child edges that resolve to a node, are not repeated, are not
    self-loops and do not close a cycle. Edges are accepted in reading order,
    so when two nodes point at each other the later edge is dropped.
    """
    _dedupe_ids(nodes)
    known = {node.id for node in nodes}
    accepted: Dict[str, List[str]] = {}

    for node in nodes:
        kept: List[str] = []
        for child in node.children:
            if child not in known or child == node.id or child in kept:
                continue
            if _reaches(accepted, child, node.id):
                logger.warning(f"[REPAIR] Dropped back-edge {node.id} -> {child}")
                continue
            kept.append(child)
            accepted.setdefault(node.id, []).append(child)
        node.children = kept


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ENTRY POINT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def repair_roadmap(raw_text: str) -> List[RoadmapNode]:
    """Parse and normalize raw model output into an ordered list of nodes."""
    raw_nodes = extract_raw_nodes(extract_json(raw_text))
    total = len(raw_nodes)
    raw_ids = {
        n["id"] for n in raw_nodes
        if isinstance(n, dict) and isinstance(n.get("id"), str)
    }

    keyed: List[Tuple[float, RoadmapNode]] = []
    for index, raw in enumerate(raw_nodes):
        try:
            keyed.append(_normalize_node(raw, index, total, raw_ids))
        except Exception as e:
            logger.warning(f"[REPAIR] Node at position {index + 1} replaced with default: {e}")
            keyed.append((index + 1, default_node(index, total)))

    keyed.sort(key=lambda pair: pair[0])
    nodes = [node for _, node in keyed]
    for position, node in enumerate(nodes, start=1):
        node.sequence = position
        node.title = f"{position}. {strip_title_prefix(node.title)}"

    sanitize_edges(nodes)
    logger.info(f"[REPAIR] ✓ {len(nodes)} nodes normalized")
    return nodes
