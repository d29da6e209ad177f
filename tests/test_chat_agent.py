"""
Tests for the tool-calling chat agent and its switch to the rule-based fallback.
"""
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from agentic.core.users.directory import SqliteUserDirectory
from agentic.core.users.tools import UserTools
from agentic.skills.chat import ChatAgent, _decode_arguments

pytestmark = pytest.mark.asyncio

ENDPOINT = "http://localhost:11434/v1"


def completion(content=None, tool_calls=None, status=200):
    message = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return httpx.Response(
        status,
        json={"choices": [{"index": 0, "message": message}]},
        request=httpx.Request("POST", f"{ENDPOINT}/chat/completions"),
    )


def tool_call(call_id, name, arguments):
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments)},
    }


@pytest.fixture
def directory(tmp_path):
    return SqliteUserDirectory(tmp_path / "users.db")


@pytest.fixture
def agent(directory):
    return ChatAgent(UserTools(directory), endpoint=ENDPOINT, model="llama3.1", enabled=True)


async def test_plain_answer(agent):
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = completion("  Hello! How can I help?  ")

        reply = await agent.converse("hi")

        assert reply == "Hello! How can I help?"
        assert mock_post.call_count == 1

        url = mock_post.call_args.args[0]
        payload = mock_post.call_args.kwargs["json"]
        assert url == f"{ENDPOINT}/chat/completions"
        assert payload["model"] == "llama3.1"
        assert payload["tool_choice"] == "auto"
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1] == {"role": "user", "content": "hi"}
        assert mock_post.call_args.kwargs["headers"]["Authorization"].startswith("Bearer ")


async def test_tool_call_round_trip(agent, directory):
    register = tool_call("call_1", "UserApi-RegisterUser", {"name": "Sara", "age": 31, "jobTitle": "Designer"})

    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = [
            completion(tool_calls=[register]),
            completion("Sara was registered with ID 1."),
        ]

        reply = await agent.converse("register Sara, 31, designer")

        assert reply == "Sara was registered with ID 1."
        assert mock_post.call_count == 2

        messages = mock_post.call_args.kwargs["json"]["messages"]
        assert messages[-1]["role"] == "tool"
        assert messages[-1]["tool_call_id"] == "call_1"
        assert json.loads(messages[-1]["content"])["name"] == "Sara"

    user = await directory.get_by_id(1)
    assert (user.name, user.age, user.job_title) == ("Sara", 31, "Designer")


async def test_offline_endpoint_uses_fallback(agent, directory):
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = httpx.ConnectError("Connection refused")

        reply = await agent.converse("register user name is Ahmed age is 30 job is Engineer")

    assert reply.startswith("[Fallback Agent - AR/EN] I've registered the user successfully.")
    assert reply.endswith("User [ID: 1] Name: Ahmed, Age: 30, Job: Engineer")
    assert (await directory.get_by_id(1)).name == "Ahmed"


async def test_connect_timeout_uses_fallback(agent):
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.side_effect = httpx.ConnectTimeout("timed out")

        reply = await agent.converse("list users")

    assert reply == "[Fallback Agent - AR/EN] Here is the list of users:\nNo users found."


async def test_disabled_agent_never_calls_model(directory):
    agent = ChatAgent(UserTools(directory), endpoint=ENDPOINT, enabled=False)

    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        reply = await agent.converse("delete all users")

        assert not mock_post.called
    assert reply == "[Fallback Agent - AR/EN] All 0 users deleted successfully."


async def test_server_error_is_not_masked(agent):
    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = completion("boom", status=500)

        with pytest.raises(httpx.HTTPStatusError):
            await agent.converse("list users")


async def test_tool_rounds_are_bounded(directory):
    agent = ChatAgent(UserTools(directory), endpoint=ENDPOINT, enabled=True, max_tool_rounds=2)
    listing = tool_call("call_x", "UserApi-GetAllUsers", {})

    with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
        mock_post.return_value = completion("still working", tool_calls=[listing])

        reply = await agent.converse("list users forever")

        assert mock_post.call_count == 2
    assert reply == "still working"


async def test_decode_arguments():
    assert _decode_arguments({"id": 1}) == {"id": 1}
    assert _decode_arguments('{"id": 2}') == {"id": 2}
    assert _decode_arguments("") == {}
    assert _decode_arguments(None) == {}
    assert _decode_arguments("not json") == {}
    assert _decode_arguments("[1, 2]") == {}
