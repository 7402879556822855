from __future__ import annotations

import math
import unittest
from datetime import date, datetime, timezone

from formflow.graph import (
    Condition,
    NodePosition,
    QuestionNode,
    TransitionEdge,
    compare,
    evaluate_condition,
    find_next_node,
    find_start_node,
    has_cycle,
    is_edge_active,
    normalize_value,
    would_create_cycle,
)
from formflow.graph.values import js_string, strict_equals, to_number


def question(node_id: str, variable_name: str, question_type: str = "text", y: float = 0) -> QuestionNode:
    return QuestionNode(
        id=node_id,
        question=f"Question {node_id}",
        type=question_type,
        variable_name=variable_name,
        position=NodePosition(x=0, y=y),
    )


def edge(
    edge_id: str,
    source: str,
    target: str,
    conditions: list[Condition] | None = None,
    logical_operator: str = "and",
    custom_expression: str | None = None,
) -> TransitionEdge:
    return TransitionEdge(
        id=edge_id,
        source=source,
        target=target,
        conditions=conditions or [],
        logical_operator=logical_operator,
        custom_expression=custom_expression,
    )


class CycleGuardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.nodes = [question("a", "name"), question("b", "age"), question("c", "msg")]

    def test_self_loop_is_always_rejected(self) -> None:
        for node in self.nodes:
            self.assertTrue(would_create_cycle(self.nodes, [], {"source": node.id, "target": node.id}))

    def test_any_edge_in_empty_graph_is_allowed(self) -> None:
        for source in self.nodes:
            for target in self.nodes:
                if source.id == target.id:
                    continue
                self.assertFalse(
                    would_create_cycle(self.nodes, [], {"source": source.id, "target": target.id})
                )

    def test_reverse_edge_is_rejected(self) -> None:
        edges: list[TransitionEdge] = []
        self.assertFalse(would_create_cycle(self.nodes, edges, edge("e1", "a", "b")))
        edges.append(edge("e1", "a", "b"))
        self.assertTrue(would_create_cycle(self.nodes, edges, edge("e2", "b", "a")))

    def test_longer_loop_is_rejected(self) -> None:
        edges = [edge("e1", "a", "b"), edge("e2", "b", "c")]
        self.assertTrue(would_create_cycle(self.nodes, edges, {"source": "c", "target": "a"}))
        self.assertFalse(would_create_cycle(self.nodes, edges, {"source": "a", "target": "c"}))

    def test_parallel_edges_do_not_look_like_a_loop(self) -> None:
        edges = [edge("e1", "a", "b"), edge("e2", "a", "b")]
        self.assertFalse(would_create_cycle(self.nodes, edges, {"source": "b", "target": "c"}))

    def test_edge_from_unknown_source_only_counts_toward_target(self) -> None:
        edges = [edge("e1", "ghost", "a")]
        self.assertTrue(would_create_cycle(self.nodes, edges, {"source": "b", "target": "c"}))

    def test_has_cycle_on_existing_graph(self) -> None:
        self.assertFalse(has_cycle(self.nodes, [edge("e1", "a", "b")]))
        self.assertTrue(has_cycle(self.nodes, [edge("e1", "a", "b"), edge("e2", "b", "a")]))
        self.assertTrue(has_cycle(self.nodes, [edge("e1", "c", "c")]))


class ValueNormalizerTests(unittest.TestCase):
    def test_numeric_strings_follow_number_coercion(self) -> None:
        self.assertEqual(normalize_value("4", "rating"), 4.0)
        self.assertEqual(normalize_value("  ", "slider"), 0.0)
        self.assertEqual(normalize_value("0x10", "rating"), 16.0)
        self.assertTrue(math.isnan(to_number("0x1_0")))
        self.assertTrue(math.isnan(to_number("0x+1")))
        self.assertTrue(math.isnan(to_number("0x")))
        self.assertTrue(math.isnan(normalize_value("abc", "rating")))
        self.assertEqual(normalize_value(3, "rating"), 3)

    def test_date_strings_parse_or_become_none(self) -> None:
        parsed = normalize_value("2024-01-05T10:00:00Z", "date")
        self.assertEqual(parsed, datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc))
        self.assertIsNone(normalize_value("not a date", "date"))

    def test_boolean_coercion(self) -> None:
        self.assertIs(normalize_value("TRUE", "boolean"), True)
        self.assertIs(normalize_value("yes", "boolean"), False)
        self.assertIs(normalize_value(0, "boolean"), False)
        self.assertIs(normalize_value(1, "boolean"), True)
        self.assertIs(normalize_value(None, "boolean"), False)

    def test_other_types_pass_through(self) -> None:
        self.assertEqual(normalize_value(" x ", "text"), " x ")
        self.assertEqual(normalize_value(["a"], "multipleChoice"), ["a"])

    def test_js_helpers(self) -> None:
        self.assertEqual(js_string(3.0), "3")
        self.assertEqual(js_string(True), "true")
        self.assertEqual(js_string(None), "null")
        self.assertTrue(strict_equals(1, 1.0))
        self.assertFalse(strict_equals("1", 1))
        self.assertFalse(strict_equals(True, 1))
        self.assertEqual(to_number(None), 0.0)


class ComparatorTests(unittest.TestCase):
    def test_emptiness_operators_for_every_type(self) -> None:
        for question_type in ("text", "rating", "boolean", "date", "dropdown"):
            self.assertTrue(compare("isEmpty", None, None, question_type))
            self.assertTrue(compare("isEmpty", "", None, question_type))
            self.assertFalse(compare("isEmpty", "x", None, question_type))
            self.assertTrue(compare("isNotEmpty", "x", None, question_type))

    def test_rating_compares_numerically(self) -> None:
        self.assertTrue(compare("greaterThan", 4, 3, "rating"))
        self.assertTrue(compare("greaterThan", "4", "3", "rating"))
        self.assertFalse(compare("greaterThan", "abc", 3, "rating"))
        self.assertTrue(compare("lessThanOrEqual", "10", 10, "slider"))
        self.assertTrue(compare("equals", "5", 5, "rating"))

    def test_rating_rejects_text_operators(self) -> None:
        self.assertFalse(compare("contains", 45, 4, "rating"))

    def test_boolean_equality(self) -> None:
        self.assertTrue(compare("equals", "true", True, "boolean"))
        self.assertTrue(compare("notEquals", False, True, "boolean"))
        self.assertFalse(compare("greaterThan", True, False, "boolean"))

    def test_date_ordering(self) -> None:
        self.assertTrue(compare("greaterThan", "2024-02-01", "2024-01-01", "date"))
        self.assertTrue(compare("equals", date(2024, 1, 1), "2024-01-01T00:00:00Z", "date"))
        self.assertFalse(compare("lessThan", "garbage", "2024-01-01", "date"))
        self.assertFalse(compare("notEquals", "garbage", "2024-01-01", "date"))

    def test_text_comparisons(self) -> None:
        self.assertTrue(compare("equals", "Yes", "Yes", "text"))
        self.assertFalse(compare("equals", "yes", "Yes", "text"))
        self.assertTrue(compare("contains", "hello world", "world", "longText"))
        self.assertTrue(compare("notContains", "hello", "bye", "text"))
        self.assertFalse(compare("greaterThan", "b", "a", "text"))

    def test_missing_operand_never_matches(self) -> None:
        self.assertFalse(compare("equals", None, "x", "text"))
        self.assertFalse(compare("notEquals", None, "x", "text"))


class ConditionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.nodes = [question("a", "name"), question("b", "score", "rating"), question("c", "limit", "rating")]

    def test_unknown_source_variable_is_false(self) -> None:
        for operator in ("equals", "notEquals", "isEmpty", "isNotEmpty"):
            condition = Condition(source_variable="missing", operator=operator, value="x")
            self.assertFalse(evaluate_condition(condition, {"missing": "x"}, self.nodes))

    def test_compares_against_other_variable(self) -> None:
        condition = Condition(source_variable="score", operator="greaterThan", value="limit", target="variable")
        self.assertTrue(evaluate_condition(condition, {"score": 4, "limit": 3}, self.nodes))
        self.assertFalse(evaluate_condition(condition, {"score": 2, "limit": 3}, self.nodes))

    def test_unknown_comparison_variable_is_false(self) -> None:
        condition = Condition(source_variable="score", operator="notEquals", value="ghost", target="variable")
        self.assertFalse(evaluate_condition(condition, {"score": 4, "ghost": 1}, self.nodes))

    def test_emptiness_ignores_value(self) -> None:
        condition = Condition(source_variable="name", operator="isEmpty", value="ignored")
        self.assertTrue(evaluate_condition(condition, {}, self.nodes))


class EdgeActivationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.nodes = [question("a", "name"), question("b", "score", "rating")]
        self.true_condition = Condition(source_variable="name", operator="equals", value="Ada")
        self.false_condition = Condition(source_variable="score", operator="greaterThan", value=4)
        self.answers = {"name": "Ada", "score": 2}

    def test_unconditional_edge_is_active(self) -> None:
        self.assertTrue(is_edge_active(edge("e", "a", "b"), {}, self.nodes))

    def test_and_requires_every_condition(self) -> None:
        candidate = edge("e", "a", "b", [self.true_condition, self.false_condition], "and")
        self.assertFalse(is_edge_active(candidate, self.answers, self.nodes))

    def test_or_requires_one_condition(self) -> None:
        candidate = edge("e", "a", "b", [self.true_condition, self.false_condition], "or")
        self.assertTrue(is_edge_active(candidate, self.answers, self.nodes))

    def test_custom_expression_takes_precedence(self) -> None:
        candidate = edge("e", "a", "b", [self.true_condition], custom_expression="score > 4")
        self.assertFalse(is_edge_active(candidate, self.answers, self.nodes))

    def test_custom_expression_javascript_spelling(self) -> None:
        candidate = edge("e", "a", "b", custom_expression='score < 3 && name === "Ada"')
        self.assertTrue(is_edge_active(candidate, self.answers, self.nodes))

    def test_custom_expression_negation_binds_to_its_operand(self) -> None:
        answers = {"agree": True, "declined": False, "x": "a"}
        self.assertTrue(is_edge_active(edge("e", "a", "b", custom_expression="agree == !declined"), answers, self.nodes))
        self.assertFalse(is_edge_active(edge("e", "a", "b", custom_expression='!x === "b"'), answers, self.nodes))

    def test_custom_expression_coerces_text_answers(self) -> None:
        answers = {"age": "30"}
        self.assertTrue(is_edge_active(edge("e", "a", "b", custom_expression="age > 18"), answers, self.nodes))
        self.assertTrue(is_edge_active(edge("e", "a", "b", custom_expression="age == 30"), answers, self.nodes))
        self.assertFalse(is_edge_active(edge("e", "a", "b", custom_expression="age === 30"), answers, self.nodes))

    def test_failing_custom_expression_is_inactive(self) -> None:
        for expression in ("undefined_var > 1", "score >", "__import__('os')", "name * 2"):
            candidate = edge("e", "a", "b", custom_expression=expression)
            with self.assertLogs("formflow.graph.conditions", level="WARNING"):
                self.assertFalse(is_edge_active(candidate, self.answers, self.nodes))


class NavigatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.nodes = [question("a", "name"), question("b", "age"), question("c", "msg")]

    def test_no_outgoing_edges_ends_flow(self) -> None:
        self.assertIsNone(find_next_node(self.nodes[2], self.nodes, [], {}))

    def test_first_active_edge_wins(self) -> None:
        edges = [
            edge("e1", "a", "c", [Condition(source_variable="name", operator="isNotEmpty")]),
            edge("e2", "a", "b"),
        ]
        result = find_next_node(self.nodes[0], self.nodes, edges, {"name": "x"})
        self.assertEqual(result.id, "c")

    def test_skips_inactive_edges(self) -> None:
        edges = [
            edge("e1", "a", "c", [Condition(source_variable="name", operator="equals", value="z")]),
            edge("e2", "a", "b"),
        ]
        result = find_next_node(self.nodes[0], self.nodes, edges, {"name": "x"})
        self.assertEqual(result.id, "b")

    def test_dangling_target_ends_flow(self) -> None:
        edges = [edge("e1", "a", "ghost"), edge("e2", "a", "b")]
        self.assertIsNone(find_next_node(self.nodes[0], self.nodes, edges, {}))

    def test_end_to_end_scenario(self) -> None:
        edges = [
            edge("ab", "a", "b"),
            edge("bc", "b", "c", [Condition(source_variable="age", operator="notEquals", value="")]),
        ]
        answers: dict[str, object] = {"name": "x"}
        current = find_next_node(self.nodes[0], self.nodes, edges, answers)
        self.assertEqual(current.id, "b")

        answers["age"] = "30"
        self.assertEqual(find_next_node(current, self.nodes, edges, answers).id, "c")

        answers["age"] = ""
        self.assertIsNone(find_next_node(current, self.nodes, edges, answers))


class StartNodeTests(unittest.TestCase):
    def test_prefers_configured_start_when_it_is_an_entry_point(self) -> None:
        nodes = [question("1", "a"), question("2", "b")]
        self.assertEqual(find_start_node(nodes, [], "2").id, "2")

    def test_ignores_configured_start_with_incoming_edges(self) -> None:
        nodes = [question("1", "a"), question("2", "b")]
        self.assertEqual(find_start_node(nodes, [edge("e", "1", "2")], "2").id, "1")

    def test_numeric_ids_sort_numerically(self) -> None:
        nodes = [question("10", "a"), question("9", "b")]
        self.assertEqual(find_start_node(nodes, []).id, "9")

    def test_non_numeric_ids_sort_by_vertical_position(self) -> None:
        nodes = [question("x", "a", y=300), question("y", "b", y=100)]
        self.assertEqual(find_start_node(nodes, []).id, "y")

    def test_falls_back_to_first_node_or_none(self) -> None:
        nodes = [question("x", "a"), question("y", "b")]
        edges = [edge("e1", "x", "y"), edge("e2", "y", "x")]
        self.assertEqual(find_start_node(nodes, edges).id, "x")
        self.assertIsNone(find_start_node([], []))


if __name__ == "__main__":
    unittest.main()
