"""
Tests for assembling task rows into a forest.
"""
from datetime import date
from types import SimpleNamespace

from planner.scheduling.hierarchy import (
    build_task_tree,
    collect_parent_ids,
    date_extent,
    find_node,
    flatten_tree,
)

from conftest import dependency_row, task_row


def _ids(nodes):
    return [node.id for node in nodes]


class TestBuildTaskTree:
    """Parent/child assembly."""

    def test_empty_input(self):
        assert build_task_tree([]) == []

    def test_nests_children_under_parents(self):
        tasks = [task_row(1), task_row(2, parent_id=1), task_row(3, parent_id=2)]
        forest = build_task_tree(tasks)

        assert _ids(forest) == [1]
        assert _ids(forest[0].subtasks) == [2]
        assert _ids(forest[0].subtasks[0].subtasks) == [3]
        assert forest[0].has_subtasks
        assert not forest[0].subtasks[0].subtasks[0].has_subtasks

    def test_every_task_appears_exactly_once(self):
        tasks = [
            task_row(1),
            task_row(2, parent_id=1),
            task_row(3, parent_id=1),
            task_row(4),
            task_row(5, parent_id=4),
            task_row(6, parent_id=99),
        ]
        ids = [node.id for node, _ in flatten_tree(build_task_tree(tasks))]
        assert sorted(ids) == [1, 2, 3, 4, 5, 6]

    def test_siblings_follow_order_index(self):
        tasks = [
            task_row(1, order_index=0),
            task_row(2, parent_id=1, order_index=2),
            task_row(3, parent_id=1, order_index=0),
            task_row(4, parent_id=1, order_index=1),
            task_row(5, order_index=1),
        ]
        forest = build_task_tree(tasks)
        assert _ids(forest) == [1, 5]
        assert _ids(forest[0].subtasks) == [3, 4, 2]

    def test_equal_order_index_keeps_input_order(self):
        tasks = [task_row(7), task_row(3), task_row(5)]
        assert _ids(build_task_tree(tasks)) == [7, 3, 5]

    def test_node_exposes_task_columns(self):
        forest = build_task_tree([task_row(1, title="Design")])
        assert forest[0].title == "Design"
        assert forest[0].start_date == date(2024, 1, 1)


class TestMalformedParents:
    """Orphans and parent loops never lose tasks."""

    def test_unknown_parent_becomes_orphan_root(self):
        forest = build_task_tree([task_row(1), task_row(2, parent_id=42)])
        assert _ids(forest) == [1, 2]
        assert forest[1].orphaned
        assert not forest[0].orphaned

    def test_self_parent_becomes_orphan_root(self):
        forest = build_task_tree([task_row(5, parent_id=5)])
        assert _ids(forest) == [5]
        assert forest[0].orphaned

    def test_parent_cycle_is_cut_at_first_task(self):
        tasks = [
            task_row(1, parent_id=2, order_index=0),
            task_row(2, parent_id=1, order_index=1),
            task_row(3, order_index=2),
        ]
        forest = build_task_tree(tasks)

        assert _ids(forest) == [3, 1]
        cut = forest[1]
        assert cut.orphaned
        assert _ids(cut.subtasks) == [2]
        assert not cut.subtasks[0].orphaned

    def test_longer_cycle_below_a_tail(self):
        tasks = [
            task_row(10, parent_id=30, order_index=0),
            task_row(20, parent_id=10, order_index=1),
            task_row(30, parent_id=20, order_index=2),
            task_row(40, parent_id=30, order_index=3),
        ]
        nodes = flatten_tree(build_task_tree(tasks))
        assert sorted(node.id for node, _ in nodes) == [10, 20, 30, 40]
        assert [node.id for node, _ in nodes if node.orphaned] == [10]


class TestDependenciesAndAssignees:
    """Edges and profiles attached to nodes."""

    def test_incoming_edges_attached_to_successor(self):
        tasks = [task_row(1), task_row(2)]
        deps = [dependency_row(1, 2), dependency_row(2, 42)]
        forest = build_task_tree(tasks, deps)

        assert forest[0].dependencies == []
        assert [dep.predecessor_id for dep in forest[1].dependencies] == [1]

    def test_profiles_mapping_resolves_assignee(self):
        profile = SimpleNamespace(id=9, display_name="Ana")
        forest = build_task_tree([task_row(1, assignee_id=9), task_row(2)], profiles={9: profile})
        assert forest[0].assignee is profile
        assert forest[1].assignee is None


class TestTreeHelpers:
    """Walks over a built forest."""

    def setup_method(self):
        self.forest = build_task_tree(
            [
                task_row(1, start=date(2024, 1, 5), end=date(2024, 1, 9)),
                task_row(2, parent_id=1, start=date(2024, 1, 2), end=date(2024, 1, 4)),
                task_row(3, start=date(2024, 1, 10), end=date(2024, 1, 20)),
            ]
        )

    def test_flatten_reports_levels_in_pre_order(self):
        assert [(node.id, level) for node, level in flatten_tree(self.forest)] == [(1, 0), (2, 1), (3, 0)]

    def test_find_node(self):
        assert find_node(self.forest, 2).id == 2
        assert find_node(self.forest, 99) is None

    def test_collect_parent_ids(self):
        assert collect_parent_ids(self.forest) == {1}

    def test_date_extent(self):
        assert date_extent(self.forest) == (date(2024, 1, 2), date(2024, 1, 20))
        assert date_extent([]) is None
