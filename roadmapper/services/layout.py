"""
Tree layout for roadmap nodes.

Nodes are placed as if the list were a binary heap: index 0 is the root,
indices 1-2 the next row, 3-6 the row below and so on. The last row may be
only partially filled.
"""

from roadmapper.schemas.roadmap import NodePosition

VERTICAL_SPACING = 100
MIN_NODE_SPACING = 140
TOP_MARGIN = 50
LEVEL_PADDING = 50
SPREAD_BASE = 1.5


def calculate_node_position(index: int, total: int) -> NodePosition:
    """Return the display coordinate of node ``index`` in a list of ``total``."""
    if index < 0 or index >= total:
        raise ValueError(f"index {index} out of range for {total} nodes")

    # floor(log2(index + 1)) without float rounding
    level = (index + 1).bit_length() - 1
    first_in_level = 2 ** level - 1
    position_in_level = index - first_in_level
    nodes_in_level = min(2 ** level, total - first_in_level)

    base_width = MIN_NODE_SPACING * 2 ** level
    x_spacing = base_width / (nodes_in_level + 1)
    x = (position_in_level + 1) * x_spacing - base_width / 2

    # Push left and right halves apart, more so on deeper rows.
    if level > 0:
        spread = LEVEL_PADDING * SPREAD_BASE ** level
        x += spread if position_in_level >= nodes_in_level / 2 else -spread

    y = level * VERTICAL_SPACING + TOP_MARGIN
    return NodePosition(x=x, y=y)
