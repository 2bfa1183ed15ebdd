import random
import unittest

from roadmapper.schemas.roadmap import Level
from roadmapper.services.fallback_generator import create_fallback_nodes
from roadmapper.services.layout import calculate_node_position


class FallbackGeneratorTests(unittest.TestCase):
    def test_node_count_by_level(self) -> None:
        self.assertEqual(len(create_fallback_nodes("Python", Level.beginner)), 8)
        self.assertEqual(len(create_fallback_nodes("Python", "intermediate")), 12)
        self.assertEqual(len(create_fallback_nodes("Python", Level.advanced)), 15)

    def test_each_node_links_to_next_two(self) -> None:
        nodes = create_fallback_nodes("Python", Level.beginner)
        self.assertEqual(nodes[0].children, ["node_2", "node_3"])
        self.assertEqual(nodes[5].children, ["node_7", "node_8"])
        self.assertEqual(nodes[6].children, [])
        self.assertEqual(nodes[7].children, [])

    def test_templated_content(self) -> None:
        node = create_fallback_nodes("Docker", Level.beginner)[2]
        self.assertEqual(node.id, "node_3")
        self.assertEqual(node.title, "3. Docker Topic 3")
        self.assertEqual(node.sequence, 3)
        self.assertEqual(len(node.description), 3)
        self.assertIn("Docker", node.description[0])
        self.assertEqual(node.position, calculate_node_position(2, 8))
        self.assertFalse(node.completed)

    def test_time_needed_range_and_seeding(self) -> None:
        first = create_fallback_nodes("Python", Level.advanced, rng=random.Random(7))
        second = create_fallback_nodes("Python", Level.advanced, rng=random.Random(7))
        self.assertEqual([n.time_needed for n in first], [n.time_needed for n in second])
        for node in first:
            self.assertGreaterEqual(node.time_needed, 1)
            self.assertLessEqual(node.time_needed, 5)


if __name__ == "__main__":
    unittest.main()
