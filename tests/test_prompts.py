import asyncio

from core.projects import ProjectRegistry
from core.server import ProjectsMCPServer
from handlers import prompts


def test_list_prompts():
    assert prompts.list_prompts() == [{"name": "summarize_projects", "description": "Summarize all projects"}]


def test_summarize_embeds_every_project():
    reg = ProjectRegistry(seed=[("A", "/a"), ("B", "/b")])
    out = prompts.get_prompt("summarize_projects", reg)
    messages = out["messages"]
    # intro + one per project + closing instruction
    assert len(messages) == 4
    resources = [m["content"]["resource"] for m in messages if m["content"]["type"] == "resource"]
    assert resources == [
        {"uri": "project:///1", "mimeType": "text/plain", "text": "/a"},
        {"uri": "project:///2", "mimeType": "text/plain", "text": "/b"},
    ]
    assert messages[-1]["content"]["type"] == "text"


def test_unknown_prompt_via_dispatcher():
    server = ProjectsMCPServer()
    out = asyncio.run(server.handle_message(
        {"jsonrpc": "2.0", "id": 5, "method": "prompts/get", "params": {"name": "nope"}}))
    assert out["error"]["code"] == -32601
