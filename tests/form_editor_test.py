from __future__ import annotations

import asyncio
import re
import unittest

from formflow.graph import Condition, EditorError, FlowHookRegistry, FormEditor


class FormEditorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hooks = FlowHookRegistry()
        self.events: list[tuple[str, dict]] = []
        for event in ("node_added", "node_removed", "edge_added", "edge_removed", "edge_rejected", "settings_updated"):
            self.hooks.register(event, lambda context, event=event: self.events.append((event, context)))
        self.editor = FormEditor(hooks=self.hooks)

    def _event_names(self) -> list[str]:
        return [name for name, _ in self.events]

    def test_add_node_defaults(self) -> None:
        first = self.editor.add_node("text")
        second = self.editor.add_node("dropdown")

        self.assertEqual(first.question, "New Question")
        self.assertRegex(first.variable_name, re.compile(r"^question_\d+_[0-9a-z]{9}$"))
        self.assertNotEqual(first.variable_name, second.variable_name)
        self.assertEqual((first.position.x, first.position.y), (250, 100))
        self.assertEqual(second.position.y, 250)
        self.assertIsNone(first.options)
        self.assertEqual(second.options, ["Option 1", "Option 2"])
        self.assertTrue(self.editor.dirty)
        self.assertEqual(self.editor.graph.settings.start_node_id, first.id)

    def test_connect_and_reject_loop(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()

        accepted = self.editor.connect(a.id, b.id)
        self.assertTrue(accepted.accepted)
        self.assertEqual(accepted.edge.conditions, [])
        self.assertEqual(accepted.edge.logical_operator, "and")

        rejected = self.editor.connect(b.id, a.id)
        self.assertFalse(rejected.accepted)
        self.assertEqual(rejected.reason, "Cannot create a loop in the form flow")
        self.assertEqual(len(self.editor.graph.edges), 1)
        self.assertIn("edge_rejected", self._event_names())

    def test_connect_rejects_self_duplicate_missing_and_unknown(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()
        self.editor.connect(a.id, b.id)

        self.assertFalse(self.editor.connect(a.id, a.id).accepted)
        self.assertFalse(self.editor.connect(a.id, b.id).accepted)
        self.assertFalse(self.editor.connect(None, b.id).accepted)
        self.assertFalse(self.editor.connect(a.id, "ghost").accepted)
        self.assertEqual(len(self.editor.graph.edges), 1)

    def test_delete_node_cascades_edges(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()
        c = self.editor.add_node()
        self.editor.connect(a.id, b.id)
        self.editor.connect(b.id, c.id)

        removed = self.editor.delete_node(b.id)
        self.assertEqual(len(removed), 2)
        self.assertEqual(self.editor.graph.edges, [])
        self.assertEqual([node.id for node in self.editor.graph.nodes], [a.id, c.id])
        self.assertEqual(self._event_names().count("edge_removed"), 2)

    def test_start_node_follows_edges(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()
        self.editor.connect(b.id, a.id)
        self.assertEqual(self.editor.graph.settings.start_node_id, b.id)

    def test_update_node_checks_variable_names(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()
        self.editor.update_node(a.id, variable_name="user_name", question="What's your name?")
        self.assertEqual(a.variable_name, "user_name")

        with self.assertRaises(EditorError):
            self.editor.update_node(b.id, variable_name="user_name")
        with self.assertRaises(EditorError):
            self.editor.update_node(b.id, variable_name="has space")
        with self.assertRaises(EditorError):
            self.editor.update_node("ghost", question="x")
        with self.assertRaises(EditorError):
            self.editor.update_node(b.id, colour="red")

    def test_duplicate_node(self) -> None:
        original = self.editor.add_node("multipleChoice")
        self.editor.update_node(original.id, options=["Red", "Blue"])
        clone = self.editor.duplicate_node(original.id)

        self.assertNotEqual(clone.id, original.id)
        self.assertNotEqual(clone.variable_name, original.variable_name)
        self.assertEqual(clone.options, ["Red", "Blue"])
        self.assertIsNot(clone.options, original.options)
        self.assertEqual((clone.position.x, clone.position.y), (300, 150))

    def test_update_and_delete_edge(self) -> None:
        a = self.editor.add_node()
        b = self.editor.add_node()
        created = self.editor.connect(a.id, b.id).edge

        condition = Condition(source_variable=a.variable_name, operator="isNotEmpty")
        self.editor.update_edge(created.id, conditions=[condition], logical_operator="or")
        self.assertEqual(created.conditions, [condition])
        self.assertEqual(created.logical_operator, "or")

        with self.assertRaises(EditorError):
            self.editor.update_edge(created.id, logical_operator="xor")

        self.editor.delete_edge(created.id)
        self.assertEqual(self.editor.graph.edges, [])
        with self.assertRaises(EditorError):
            self.editor.delete_edge(created.id)

    def test_mark_saved_clears_dirty_flag(self) -> None:
        self.editor.add_node()
        self.editor.mark_saved()
        self.assertFalse(self.editor.dirty)


class HookRegistryTests(unittest.TestCase):
    def test_failing_hook_does_not_propagate(self) -> None:
        hooks = FlowHookRegistry()
        calls: list[str] = []

        def broken(context: dict) -> None:
            raise RuntimeError("boom")

        hooks.register("node_added", broken)
        hooks.register("node_added", lambda context: calls.append(context["node_id"]))

        with self.assertLogs("formflow.graph.hooks", level="WARNING"):
            invocations = hooks.emit("node_added", {"node_id": "n1"})

        self.assertEqual(calls, ["n1"])
        self.assertEqual(invocations[0].error, "boom")
        self.assertIsNone(invocations[1].error)

    def test_aemit_awaits_coroutines(self) -> None:
        hooks = FlowHookRegistry()
        seen: list[str] = []

        async def record(context: dict) -> str:
            seen.append(context["variable_name"])
            return "ok"

        hooks.register("answer_recorded", record)
        invocations = asyncio.run(hooks.aemit("answer_recorded", {"variable_name": "age"}))

        self.assertEqual(seen, ["age"])
        self.assertEqual(invocations[0].result, "ok")
        self.assertEqual(invocations[0].callback_name, "record")

    def test_clear(self) -> None:
        hooks = FlowHookRegistry()
        hooks.register("edge_added", lambda context: None)
        hooks.register("edge_removed", lambda context: None)
        hooks.clear("edge_added")
        self.assertEqual(hooks.callbacks_for("edge_added"), [])
        hooks.clear()
        self.assertEqual(hooks.callbacks_for("edge_removed"), [])


if __name__ == "__main__":
    unittest.main()
