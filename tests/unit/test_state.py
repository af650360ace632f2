"""Unit tests for State."""

from agentnet import AgentResult, State, TextMessage, ToolResultMessage, ToolUse
from agentnet.types import default_formatter
from tests.conftest import text, tool_call


def _result(name: str, *output, tool_calls=()) -> AgentResult:
    return AgentResult(agent_name=name, output=list(output), tool_calls=list(tool_calls))


class TestStateData:
    def test_get_set(self):
        state = State({"a": 1})
        state.data["b"] = 2
        state.data.set("c", 3)
        assert state.data["a"] == 1
        assert dict(state.data) == {"a": 1, "b": 2, "c": 3}
        assert state.data.get("missing") is None

    def test_update_and_delete(self):
        state = State()
        state.data.update({"x": 1, "y": 2})
        del state.data["x"]
        assert "x" not in state.data
        assert len(state.data) == 1

    def test_change_listener(self):
        state = State({"k": "old"})
        changes = []
        unsubscribe = state.data.subscribe(lambda key, old, new: changes.append((key, old, new)))
        state.data["k"] = "new"
        del state.data["k"]
        unsubscribe()
        state.data["k"] = "ignored"
        assert changes == [("k", "old", "new"), ("k", "new", None)]


class TestResults:
    def test_results_is_a_copy(self):
        state = State()
        state.append_result(_result("a", text("hi")))
        snapshot = state.results
        snapshot.clear()
        assert len(state.results) == 1

    def test_append_preserves_order(self):
        state = State()
        for name in ("a", "b", "c"):
            state.append_result(_result(name))
        assert [r.agent_name for r in state.results] == ["a", "b", "c"]

    def test_set_results_replaces(self):
        state = State()
        state.append_result(_result("old"))
        state.set_results([_result("x"), _result("y")])
        assert [r.agent_name for r in state.results] == ["x", "y"]

    def test_get_results_from_is_suffix(self):
        state = State()
        results = [_result(str(i)) for i in range(5)]
        for r in results:
            state.append_result(r)
        for n in range(6):
            tail = state.get_results_from(n)
            assert len(tail) == 5 - n
            assert tail == results[n:]

    def test_get_results_from_past_end(self):
        state = State()
        state.append_result(_result("a"))
        assert state.get_results_from(3) == []


class TestFormatHistory:
    def test_messages_come_first(self):
        seed = TextMessage(role="user", content="earlier")
        state = State(messages=[seed])
        state.append_result(_result("a", text("reply")))
        history = state.format_history()
        assert history[0] is seed
        assert history[1].content == "reply"

    def test_output_then_tool_calls(self):
        call = tool_call("lookup")
        res = ToolResultMessage(tool=call.tools[0], content={"data": 1})
        state = State()
        state.append_result(_result("a", call, tool_calls=[res]))
        assert state.format_history() == [call, res]

    def test_set_then_append_round_trip(self):
        x = [_result("a", text("one")), _result("b", text("two"))]
        y = _result("c", text("three"))
        state = State()
        state.set_results(x)
        state.append_result(y)
        expected = [m for r in [*x, y] for m in default_formatter(r)]
        assert state.format_history() == expected

    def test_custom_formatter(self):
        state = State()
        state.append_result(_result("a", text("hello")))
        history = state.format_history(
            lambda r: [TextMessage(role="assistant", content=f"{r.agent_name}: {r.output[0].text()}")]
        )
        assert history[0].content == "a: hello"


class TestLifecycle:
    def test_thread_id_set_once(self):
        state = State()
        state.thread_id = "t1"
        state.thread_id = "t2"
        assert state.thread_id == "t1"

    def test_clone_is_independent(self):
        state = State({"k": [1]}, thread_id="t")
        state.append_result(_result("a"))
        clone = state.clone()
        clone.data["k2"] = True
        clone.append_result(_result("b"))
        assert "k2" not in state.data
        assert len(state.results) == 1
        assert len(clone.results) == 2
        assert clone.thread_id == "t"

    def test_dict_round_trip(self):
        call = ToolUse(id="c1", name="lookup", input={"q": "x"})
        state = State({"n": 1}, thread_id="t")
        state.append_result(_result(
            "a", tool_call("lookup", call_id="c1", q="x"),
            tool_calls=[ToolResultMessage(tool=call, content={"data": "ok"})],
        ))
        restored = State.from_dict(state.to_dict())
        assert restored.thread_id == "t"
        assert dict(restored.data) == {"n": 1}
        assert restored.format_history() == state.format_history()

    def test_data_keys_are_unconstrained(self):
        state = State({"messages": 3, "results": "x", "thread_id": "ext"})
        assert state.data["messages"] == 3
        assert state.results == []
        assert state.thread_id is None

        restored = State.from_dict(state.to_dict())
        assert dict(restored.data) == {"messages": 3, "results": "x", "thread_id": "ext"}
        assert restored.thread_id is None
