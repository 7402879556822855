from __future__ import annotations

import unittest
from datetime import date, datetime

from formflow.graph import Condition, TransitionEdge
from formflow.graph.operators import (
    allowed_comparison_targets,
    allowed_operators,
    condition_problem,
    describe_edge,
    operator_choices,
    operator_label,
)
from formflow.graph.templates import format_answer, long_date, placeholder_names, render_question


class TemplateTests(unittest.TestCase):
    def test_render_question_fills_known_answers(self) -> None:
        answers = {"user_name": "Ada", "subscribed": True, "visit": date(2024, 1, 5), "score": 4.0}
        self.assertEqual(render_question("Hi [user_name]!", answers), "Hi Ada!")
        self.assertEqual(render_question("Subscribed: [subscribed]", answers), "Subscribed: Yes")
        self.assertEqual(render_question("On [visit]", answers), "On January 5th, 2024")
        self.assertEqual(render_question("Score [score]", answers), "Score 4")

    def test_unanswered_placeholders_render_empty(self) -> None:
        self.assertEqual(render_question("Hi [nickname], welcome", {}), "Hi , welcome")
        self.assertEqual(render_question("", {"a": 1}), "")

    def test_placeholder_names_are_unique_and_ordered(self) -> None:
        self.assertEqual(placeholder_names("[b] and [a] and [b]"), ["b", "a"])

    def test_format_answer(self) -> None:
        self.assertEqual(format_answer(True, "boolean"), "Yes")
        self.assertEqual(format_answer("true", "boolean"), "No")
        self.assertEqual(format_answer(4, "rating"), "4/5")
        self.assertEqual(format_answer(35, "slider"), "35%")
        self.assertEqual(format_answer("lots", "slider"), "0%")
        self.assertEqual(format_answer(datetime(2023, 3, 22, 9, 30), "date"), "March 22nd, 2023")
        self.assertEqual(format_answer("2023-03-22", "date"), "2023-03-22")
        self.assertEqual(format_answer("hello", "text"), "hello")

    def test_long_date_ordinals(self) -> None:
        expected = {1: "1st", 2: "2nd", 3: "3rd", 4: "4th", 11: "11th", 12: "12th", 13: "13th", 21: "21st", 23: "23rd"}
        for day, suffix in expected.items():
            self.assertEqual(long_date(date(2024, 1, day)), f"January {suffix}, 2024")


class OperatorTests(unittest.TestCase):
    def test_operator_choices_by_type(self) -> None:
        self.assertEqual(
            allowed_operators("text"),
            ["equals", "notEquals", "contains", "notContains", "isEmpty", "isNotEmpty"],
        )
        self.assertEqual(allowed_operators("boolean"), ["equals", "notEquals"])
        self.assertIn("greaterThanOrEqual", allowed_operators("rating"))
        self.assertEqual(allowed_operators("date"), ["equals", "notEquals"])
        self.assertEqual(operator_choices("boolean")[0], ("equals", "is"))

    def test_operator_label(self) -> None:
        self.assertEqual(operator_label("greaterThanOrEqual", "rating"), "is at least")
        self.assertEqual(operator_label("contains", "rating"), "contains")

    def test_comparison_targets(self) -> None:
        self.assertEqual(allowed_comparison_targets("rating"), ["value"])
        self.assertEqual(allowed_comparison_targets("dropdown"), ["value"])
        self.assertEqual(allowed_comparison_targets("text"), ["value", "variable"])

    def test_condition_problem(self) -> None:
        self.assertEqual(
            condition_problem(Condition(source_variable="", operator="equals", value="x")),
            "Please select a question to check",
        )
        self.assertEqual(
            condition_problem(Condition(source_variable="age", operator="equals", value="")),
            "Please specify a value to compare against",
        )
        self.assertIsNone(condition_problem(Condition(source_variable="age", operator="isEmpty")))
        self.assertIsNone(condition_problem(Condition(source_variable="ok", operator="equals", value=False)))

    def test_describe_edge(self) -> None:
        self.assertEqual(describe_edge(TransitionEdge(id="e", source="a", target="b")), "Always")
        single = TransitionEdge(
            id="e",
            source="a",
            target="b",
            conditions=[Condition(source_variable="age", operator="greaterThan", value=18)],
        )
        self.assertEqual(describe_edge(single), "age greaterThan")
        double = TransitionEdge(
            id="e",
            source="a",
            target="b",
            conditions=[
                Condition(source_variable="age", operator="greaterThan", value=18),
                Condition(source_variable="country", operator="equals", value="NL"),
            ],
            logical_operator="or",
        )
        self.assertEqual(describe_edge(double), "2 conditions (OR)")


if __name__ == "__main__":
    unittest.main()
