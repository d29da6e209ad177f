import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from .nlu.types import Intent, NLUResult
from .users.tools import UserTools

UPDATE_ID_MISSING = (
    "[Fallback Agent] I understood you want to update a user, but I couldn't find the ID. "
    "Please specify 'id X'."
)
UNRECOGNIZED = (
    "[Fallback Agent] I understood you want to do something, but since the AI brain (Ollama) is offline, "
    "I can only handle 'Register', 'Get Users', and 'Delete All' commands (English or Arabic) right now."
)


@dataclass(slots=True)
class Outcome:
    intent: Intent
    raw: Optional[str] = None     # tool output, still to be formatted
    reply: Optional[str] = None   # final text, skips formatting


Handler = Callable[[NLUResult], Awaitable[Outcome]]


class Router:
    """
    Dispatches a parsed command to exactly one user tool call.

    Intents whose required slot is missing never reach the directory.
    """

    def __init__(self, tools: UserTools):
        self.tools = tools
        self.log = logging.getLogger("router")
        self.handlers: Dict[Intent, Handler] = {
            Intent.REGISTER: self._register,
            Intent.UPDATE: self._update,
            Intent.DELETE: self._delete,
            Intent.GET_BY_ID: self._get_by_id,
            Intent.LIST: self._list,
            Intent.DELETE_ALL: self._delete_all,
        }

    async def dispatch(self, command: NLUResult) -> Outcome:
        handler = self.handlers.get(command.intent)
        if handler is None:
            return Outcome(command.intent, reply=UNRECOGNIZED)
        self.log.info("Router: Dispatching %s", command.intent.value)
        return await handler(command)

    async def _register(self, command: NLUResult) -> Outcome:
        s = command.slots
        raw = await self.tools.RegisterUser(s.name, s.age, s.job_title)
        return Outcome(command.intent, raw=raw)

    async def _update(self, command: NLUResult) -> Outcome:
        s = command.slots
        if s.id is None:
            self.log.info("Router: Update without an ID, asking for clarification")
            return Outcome(command.intent, reply=UPDATE_ID_MISSING)
        raw = await self.tools.UpdateUser(s.id, s.name, s.age, s.job_title)
        return Outcome(command.intent, raw=raw)

    async def _delete(self, command: NLUResult) -> Outcome:
        if command.slots.id is None:
            return self._fall_through(command)
        raw = await self.tools.DeleteUser(command.slots.id)
        return Outcome(command.intent, raw=raw)

    async def _get_by_id(self, command: NLUResult) -> Outcome:
        if command.slots.id is None:
            return self._fall_through(command)
        raw = await self.tools.GetUserById(command.slots.id)
        return Outcome(command.intent, raw=raw)

    async def _list(self, command: NLUResult) -> Outcome:
        # free-text filters are not parsed here
        raw = await self.tools.GetAllUsers(jobTitleFilter=None, minAge=None, maxAge=None)
        return Outcome(command.intent, raw=raw)

    async def _delete_all(self, command: NLUResult) -> Outcome:
        raw = await self.tools.DeleteAllUsers()
        return Outcome(command.intent, raw=raw)

    def _fall_through(self, command: NLUResult) -> Outcome:
        # Delete and GetById end at the generic reply, unlike Update
        self.log.info("Router: %s without an ID, falling through", command.intent.value)
        return Outcome(command.intent, reply=UNRECOGNIZED)
