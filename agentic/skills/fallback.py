"""
Rule-based agent used when the model endpoint is unreachable.
"""

import logging
from typing import Optional

from agentic.core.formatter import format_result
from agentic.core.nlu.nlu import NLU
from agentic.core.nlu.types import Intent
from agentic.core.router import Router
from agentic.core.users.tools import UserTools

logger = logging.getLogger("fallback_agent")

TAG = "[Fallback Agent - AR/EN] "

_PREFIXES = {
    Intent.REGISTER: TAG + "I've registered the user successfully. (AI was offline, used logic). Details:\n",
    Intent.LIST: TAG + "Here is the list of users:\n",
}


class FallbackAgent:
    """Classify, extract, dispatch and format a prompt in one pass."""

    def __init__(self, tools: UserTools, nlu: Optional[NLU] = None):
        self.nlu = nlu or NLU()
        self.router = Router(tools)

    async def execute(self, prompt: str) -> str:
        logger.info("Fallback Agent processing prompt: %s", prompt)
        command = self.nlu.parse(prompt)
        outcome = await self.router.dispatch(command)

        if outcome.reply is not None:
            return outcome.reply

        formatted = format_result(outcome.raw or "")
        return _PREFIXES.get(outcome.intent, TAG) + formatted
