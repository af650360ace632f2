"""Unit tests for Network, NetworkRun and routers."""

import pytest

from agentnet import (
    Agent, AgentLifecycle, AgentResult, FunctionRouter, ModelRouter, Network, NetworkConfig,
    NetworkRunError, NoAgentsAvailableError, RouterError, RoutingAgent, State, create_tool,
)
from agentnet.network import NetworkRun, create_default_routing_agent
from tests.conftest import ScriptedModel, text, tool_call


def _agents(model, *names):
    return [Agent(n, f"You are {n}.", model=model) for n in names]


class TestFunctionRouter:
    async def test_router_returns_none(self, model):
        network = Network("n", _agents(model, "Worker"), router=lambda args: None)
        run = await network.run("hi")
        assert run.state.results == []
        assert model.calls == []

    async def test_single_worker(self, model):
        worker, = _agents(model, "Worker")

        def router(args):
            return worker if args.call_count == 0 else None

        run = await Network("n", [worker], router=router).run("hi")
        assert [r.agent_name for r in run.state.results] == ["Worker"]

    async def test_names_resolve(self, model):
        network = Network("n", _agents(model, "Worker"), router=lambda a: ["Worker"] if a.call_count == 0 else None)
        run = await network.run("hi")
        assert len(run.state.results) == 1

    async def test_results_match_invocations(self, model):
        a, b = _agents(model, "A", "B")
        order = [a, b, a]

        def router(args):
            return order[args.call_count] if args.call_count < len(order) else None

        run = await Network("n", [a, b], router=router).run("hi")
        assert [r.agent_name for r in run.state.results] == ["A", "B", "A"]
        assert [c["agent_id"] for c in model.calls] == ["A", "B", "A"]
        assert run.call_count == 3

    async def test_router_args(self, model):
        seen = []
        worker, = _agents(model, "Worker")

        async def router(args):
            seen.append((args.input, args.call_count, args.last_result, args.network.name))
            return worker if args.call_count == 0 else None

        await Network("n", [worker], router=router).run("task")
        assert seen[0] == ("task", 0, None, "n")
        assert seen[1][1] == 1
        assert seen[1][2].agent_name == "Worker"

    async def test_last_result_not_removed(self, model):
        worker, = _agents(model, "Worker")
        run = await Network("n", [worker], router=lambda a: worker if a.call_count < 2 else None).run("hi")
        assert len(run.state.results) == 2

    async def test_lifo_order(self, model):
        a, b = _agents(model, "A", "B")
        run = await Network("n", [a, b], router=lambda args: [a, b] if args.call_count == 0 else None).run("hi")
        assert [r.agent_name for r in run.state.results] == ["B", "A"]

    async def test_stack_visible_to_router(self, model):
        a, b = _agents(model, "A", "B")
        stacks = []

        def router(args):
            stacks.append([agent.name for agent in args.stack])
            return [a, b] if args.call_count == 0 else None

        await Network("n", [a, b], router=router).run("hi")
        assert stacks == [[], ["A"], []]

    async def test_dynamic_agent_added_to_run(self, model):
        known, = _agents(model, "Known")
        extra = Agent("Extra", "sys", model=model)
        network = Network("n", [known], router=lambda a: extra if a.call_count == 0 else None)
        run = await network.run("hi")
        assert run.state.results[0].agent_name == "Extra"
        assert "Extra" not in network.agents
        assert "Extra" not in run.agents

    async def test_unknown_name_raises(self, model):
        network = Network("n", _agents(model, "Worker"), router=lambda a: ["Ghost"])
        with pytest.raises(RouterError):
            await network.run("hi")

    async def test_agents_run_single_shot(self):
        calls = []
        model = ScriptedModel([[tool_call("count")], [text("never")]])
        worker = Agent("Worker", "sys", model=model, tools=[create_tool("count", lambda i, o: calls.append(1))])
        run = await Network("n", [worker], router=lambda a: worker if a.call_count == 0 else None).run("hi")
        assert len(model.calls) == 1
        assert run.state.results[0].tool_calls[0].content == {"data": "count successfully executed"}

    async def test_tools_see_shared_state(self, model):
        def remember(inp, opts):
            opts.network.state.data["done"] = True

        model.script = [[tool_call("remember")]]
        worker = Agent("Worker", "sys", model=model, tools=[create_tool("remember", remember)])

        def router(args):
            return None if args.network.state.data.get("done") else worker

        run = await Network("n", [worker], router=router).run("hi")
        assert run.state.data["done"] is True
        assert len(run.state.results) == 1

    async def test_max_iter_caps_calls(self, model):
        worker, = _agents(model, "Worker")
        network = Network("n", [worker], router=lambda a: worker, config=NetworkConfig(max_iter=3))
        run = await network.run("hi")
        assert len(run.state.results) == 3

    async def test_explicit_function_router(self, model):
        worker, = _agents(model, "Worker")
        router = FunctionRouter(lambda a: worker if a.call_count == 0 else None)
        run = await Network("n", [worker]).run("hi", router=router)
        assert len(run.state.results) == 1


class TestRunErrors:
    async def test_no_enabled_agents(self, model):
        agent = Agent("A", "sys", model=model, lifecycle=AgentLifecycle(enabled=lambda args: False))
        with pytest.raises(NoAgentsAvailableError):
            await Network("n", [agent], router=lambda a: agent).run("hi")

    async def test_no_router_no_model(self, model):
        with pytest.raises(RouterError):
            await Network("n", _agents(model, "A")).run("hi")

    async def test_run_is_single_use(self, model):
        network = Network("n", _agents(model, "A"), router=lambda a: None)
        run = NetworkRun(network, State())
        await run.run("hi")
        with pytest.raises(NetworkRunError):
            await run.run("again")

    async def test_available_agents_filters(self, model):
        on = Agent("On", "sys", model=model)
        off = Agent("Off", "sys", model=model, lifecycle=AgentLifecycle(enabled=lambda args: False))
        run = NetworkRun(Network("n", [on, off]), State())
        assert [a.name for a in await run.available_agents()] == ["On"]


class TestModelRouter:
    async def test_default_routing_agent(self):
        routing_model = ScriptedModel([[tool_call("select_agent", name="Worker")], [text("stop")]])
        worker_model = ScriptedModel([[text("work done")]])
        worker = Agent("Worker", "sys", description="does work", model=worker_model)

        network = Network("n", [worker], default_model=routing_model)
        run = await network.run("hi", router=None)

        assert [r.agent_name for r in run.state.results] == ["Worker"]
        first = routing_model.calls[0]
        assert first["agent_id"] == "Default routing agent"
        assert first["tool_choice"] == "select_agent"
        assert "<name>Worker</name>" in first["messages"][0].content

    async def test_invalid_selection_stops(self):
        routing_model = ScriptedModel([[tool_call("select_agent", name="Ghost")]])
        network = Network("n", [Agent("Worker", "sys")], default_model=routing_model)
        run = await network.run("hi")
        assert run.state.results == []

    async def test_custom_routing_agent(self, model):
        worker, = _agents(model, "Worker")
        router = RoutingAgent(
            "router", "Pick one.",
            model=ScriptedModel([[text("Worker")], [text("")]]),
            on_route=lambda args: [args.result.output[0].content] if args.result.output[0].content else None,
        )
        run = await Network("n", [worker], router=router).run("hi")
        assert isinstance(Network("m", [], router=router).router, ModelRouter)
        assert [r.agent_name for r in run.state.results] == ["Worker"]

    async def test_function_router_can_defer(self, model):
        worker, = _agents(model, "Worker")
        router_agent = RoutingAgent(
            "router", "Pick one.",
            model=ScriptedModel([[text("x")]]),
            on_route=lambda args: ["Worker"],
        )

        def router(args):
            return router_agent if args.call_count == 0 else None

        run = await Network("n", [worker], router=router).run("hi")
        assert len(run.state.results) == 1

    async def test_routing_agent_needs_network(self, model):
        with pytest.raises(RouterError):
            await create_default_routing_agent().run("hi", model=model)

    async def test_routing_results_not_stored(self):
        routing_model = ScriptedModel([[tool_call("select_agent", name="Worker")], [text("stop")]])
        worker = Agent("Worker", "sys", model=ScriptedModel())
        run = await Network("n", [worker], default_model=routing_model).run("hi")
        assert all(r.agent_name == "Worker" for r in run.state.results)


class TestRunState:
    async def test_default_state_is_cloned(self, model):
        seed = State({"k": 1})
        worker, = _agents(model, "Worker")
        network = Network("n", [worker], default_state=seed, router=lambda a: worker if a.call_count == 0 else None)
        run = await network.run("hi")
        assert run.state is not seed
        assert run.state.data["k"] == 1
        assert seed.results == []

    async def test_state_instance_used_as_is(self, model):
        state = State()
        worker, = _agents(model, "Worker")
        run = await Network("n", [worker], router=lambda a: worker if a.call_count == 0 else None).run("hi", state=state)
        assert run.state is state
        assert len(state.results) == 1

    async def test_serialized_state(self, model):
        prior = AgentResult("Worker", output=[text("before")])
        serialized = State({"k": "v"}, results=[prior]).to_dict()
        worker, = _agents(model, "Worker")
        run = await Network("n", [worker], router=lambda a: worker if a.call_count == 0 else None).run(
            "hi", state=State.from_dict(serialized),
        )
        assert run.state.data["k"] == "v"
        assert len(run.state.results) == 2
        assert model.calls[0]["messages"][-1].content == "before"

    async def test_mapping_seeds_data(self, model):
        worker, = _agents(model, "Worker")
        network = Network("n", [worker], router=lambda a: worker if a.call_count == 0 else None)
        run = await network.run("hi", state={"messages": 3, "thread_id": "ext-123", "user": "bob"})
        assert dict(run.state.data) == {"messages": 3, "thread_id": "ext-123", "user": "bob"}
        assert run.state.thread_id is None
        assert len(run.state.results) == 1
