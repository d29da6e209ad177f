"""
Conversational agent backed by an OpenAI-compatible chat endpoint (Ollama by default).

The model manages users through the UserApi tools. When the endpoint cannot
be reached the prompt is handed to the rule-based FallbackAgent instead.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from agentic.core.config import Config
from agentic.core.users.tools import TOOL_SPECS, UserTools
from agentic.skills.fallback import FallbackAgent

logger = logging.getLogger("chat_agent")

SYSTEM_PROMPT = (
    "You are 'Agentic', an intelligent and precise assistant for the User Management System.\n"
    "CORE RESPONSIBILITIES:\n"
    "1. Support multiple languages, including Arabic and English.\n"
    "2. Use the provided tools to manage users (Create, Read, Update, Delete).\n"
    "3. If a user request is ambiguous, ASK for clarification instead of guessing.\n\n"
    "AVAILABLE TOOLS:\n"
    "- UserApi-RegisterUser: Registers a new user. REQUIRED: Name, Age, Job Title.\n"
    "- UserApi-UpdateUser: Updates existing user. REQUIRED: User ID.\n"
    "- UserApi-DeleteUser: Deletes a user. REQUIRED: User ID.\n"
    "- UserApi-DeleteAllUsers: Deletes ALL users. CAUTION: Only use if explicitly requested.\n"
    "- UserApi-GetAllUsers: Lists users. OPTIONAL: Filter by Job, Min/Max Age.\n"
    "- UserApi-GetUserById: Gets a user. REQUIRED: User ID.\n\n"
    "RESPONSE GUIDELINES:\n"
    "- After a tool executes, confirm the action in the SAME language the user used.\n"
    "- Include key details (ID, Name) in your confirmation.\n"
    "- If the tool fails, explain why based on the error message."
)

# Failures that mean the model is unreachable, as opposed to a bad answer
OFFLINE_ERRORS = (httpx.NetworkError, httpx.ConnectTimeout)


def _decode_arguments(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError:
        logger.warning("ChatAgent: Undecodable tool arguments: %r", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


class ChatAgent:
    """
    Tool-calling chat loop with a rule-based fallback.

    Usage:
        agent = ChatAgent(UserTools(directory))
        reply = await agent.converse("register Sara, 31, designer")
    """

    def __init__(
        self,
        tools: UserTools,
        fallback: Optional[FallbackAgent] = None,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tool_rounds: Optional[int] = None,
        enabled: Optional[bool] = None,
    ):
        self.tools = tools
        self.fallback = fallback or FallbackAgent(tools)
        self.endpoint = (endpoint or Config.AI_ENDPOINT).rstrip("/")
        self.model = model or Config.AI_MODEL_ID
        self.api_key = api_key or Config.AI_API_KEY
        self.timeout = timeout or Config.AI_TIMEOUT
        self.max_tool_rounds = max_tool_rounds or Config.AI_MAX_TOOL_ROUNDS
        self.enabled = Config.AI_ENABLED if enabled is None else enabled

    async def converse(self, prompt: str) -> str:
        if not self.enabled:
            logger.info("ChatAgent: AI disabled, using Fallback Rule-Based Agent")
            return await self.fallback.execute(prompt)
        try:
            return await self._complete(prompt)
        except OFFLINE_ERRORS as e:
            logger.warning("ChatAgent: Model endpoint is offline (%s). Switching to Fallback Rule-Based Agent.", e)
            return await self.fallback.execute(prompt)

    async def _complete(self, prompt: str) -> str:
        """Run the tool-calling loop until the model answers with plain content."""
        url = f"{self.endpoint}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        content = ""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for round_no in range(1, self.max_tool_rounds + 1):
                payload = {
                    "model": self.model,
                    "messages": messages,
                    "tools": TOOL_SPECS,
                    "tool_choice": "auto",
                    "stream": False,
                }
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                message = response.json()["choices"][0]["message"]
                content = (message.get("content") or "").strip()

                tool_calls = message.get("tool_calls") or []
                if not tool_calls:
                    return content

                logger.info("ChatAgent: Round %d requested %d tool call(s)", round_no, len(tool_calls))
                messages.append(message)
                for call in tool_calls:
                    function = call.get("function") or {}
                    result = await self.tools.invoke(
                        function.get("name", ""),
                        _decode_arguments(function.get("arguments")),
                    )
                    messages.append({"role": "tool", "tool_call_id": call.get("id"), "content": result})

        logger.warning("ChatAgent: Stopped after %d tool rounds without a final answer", self.max_tool_rounds)
        return content
