"""
Tests for the rule-based fallback agent end to end: prompt -> directory -> text.
"""
import pytest

from agentic.core.contracts import User
from agentic.core.router import UNRECOGNIZED, UPDATE_ID_MISSING
from agentic.core.users.directory import SqliteUserDirectory, UserDirectory
from agentic.core.users.tools import UserTools
from agentic.skills.fallback import FallbackAgent

pytestmark = pytest.mark.asyncio

REGISTERED = "[Fallback Agent - AR/EN] I've registered the user successfully. (AI was offline, used logic). Details:\n"
LISTED = "[Fallback Agent - AR/EN] Here is the list of users:\n"


class RecordingDirectory(UserDirectory):
    """Directory stub that records every call."""

    def __init__(self, fail: Exception | None = None):
        self.calls = []
        self.fail = fail

    def _record(self, *call):
        self.calls.append(call)
        if self.fail is not None:
            raise self.fail

    async def create(self, name, age, job_title):
        self._record("create", name, age, job_title)
        return User(id=1, name=name, age=age, job_title=job_title)

    async def get_by_id(self, user_id):
        self._record("get_by_id", user_id)
        return None

    async def update(self, user_id, name=None, age=None, job_title=None):
        self._record("update", user_id, name, age, job_title)
        return User(id=user_id, name=name or "Kept", age=age or 1, job_title=job_title or "Kept")

    async def delete(self, user_id):
        self._record("delete", user_id)
        return True

    async def delete_all(self):
        self._record("delete_all")
        return 0

    async def list(self, job_title_filter=None, min_age=None, max_age=None):
        self._record("list", job_title_filter, min_age, max_age)
        return []


@pytest.fixture
def directory(tmp_path):
    return SqliteUserDirectory(tmp_path / "users.db")


@pytest.fixture
def agent(directory):
    return FallbackAgent(UserTools(directory))


@pytest.fixture
def recording():
    return RecordingDirectory()


async def test_register_with_defaults(agent, directory):
    reply = await agent.execute("register a user")
    assert reply == REGISTERED + "User [ID: 1] Name: Fallback User, Age: 25, Job: Unknown"

    user = await directory.get_by_id(1)
    assert (user.name, user.age, user.job_title) == ("Fallback User", 25, "Unknown")


async def test_register_english(agent):
    reply = await agent.execute("register user name is Ahmed age is 30 job is Engineer")
    assert reply == REGISTERED + "User [ID: 1] Name: Ahmed, Age: 30, Job: Engineer"


async def test_register_arabic(agent):
    reply = await agent.execute("سجل اسمه أحمد عمره 28 وظيفته مهندس")
    assert reply == REGISTERED + "User [ID: 1] Name: أحمد, Age: 28, Job: مهندس"


async def test_update_merges_fields(agent, directory):
    await directory.create("Ahmed", 30, "Engineer")

    reply = await agent.execute("update id 1 age is 40")

    assert reply == "[Fallback Agent - AR/EN] User [ID: 1] Name: Ahmed, Age: 40, Job: Engineer"


async def test_update_dispatch_arguments(recording):
    agent = FallbackAgent(UserTools(recording))
    await agent.execute("update id 5 age is 40")
    assert recording.calls == [("update", 5, None, 40, None)]


async def test_update_unknown_user(agent):
    reply = await agent.execute("update id 42 name to Sara")
    assert reply == "[Fallback Agent - AR/EN] User with ID 42 not found."


async def test_update_with_id_token_but_no_number_asks_for_id(recording):
    agent = FallbackAgent(UserTools(recording))
    reply = await agent.execute("update the user id please")
    assert reply == UPDATE_ID_MISSING
    assert recording.calls == []


async def test_update_without_id_token_is_unrecognized(recording):
    agent = FallbackAgent(UserTools(recording))
    reply = await agent.execute("update name to Sara")
    assert reply == UNRECOGNIZED
    assert recording.calls == []


async def test_delete_by_id(agent, directory):
    await directory.create("Sara", 31, "Designer")

    assert await agent.execute("delete user id 1") == "[Fallback Agent - AR/EN] User deleted successfully."
    assert await agent.execute("حذف رقم 1") == "[Fallback Agent - AR/EN] User with ID 1 not found."


async def test_delete_without_number_falls_through(recording):
    agent = FallbackAgent(UserTools(recording))
    reply = await agent.execute("delete user id")
    assert reply == UNRECOGNIZED
    assert recording.calls == []


async def test_get_by_id(agent, directory):
    await directory.create("Sara", 31, "Designer")

    reply = await agent.execute("هات مستخدم رقم 1")

    assert reply == "[Fallback Agent - AR/EN] User [ID: 1] Name: Sara, Age: 31, Job: Designer"


async def test_get_by_id_without_number_falls_through(recording):
    agent = FallbackAgent(UserTools(recording))
    assert await agent.execute("get user id") == UNRECOGNIZED
    assert recording.calls == []


async def test_list_users(agent, directory):
    assert await agent.execute("list users") == LISTED + "No users found."

    await directory.create("Sara", 31, "Designer")
    await directory.create("Omar", 45, "Pilot")

    reply = await agent.execute("اعرض المستخدمين")
    assert reply == LISTED + (
        "User [ID: 1] Name: Sara, Age: 31, Job: Designer\n"
        "User [ID: 2] Name: Omar, Age: 45, Job: Pilot"
    )


async def test_list_never_filters(recording):
    agent = FallbackAgent(UserTools(recording))
    await agent.execute("show users older than 30 who are engineers")
    assert recording.calls == [("list", None, None, None)]


async def test_delete_all(agent, directory):
    await directory.create("Sara", 31, "Designer")
    await directory.create("Omar", 45, "Pilot")

    reply = await agent.execute("delete all users")

    assert reply == "[Fallback Agent - AR/EN] All 2 users deleted successfully."
    assert await directory.list() == []


async def test_unrecognized(recording):
    agent = FallbackAgent(UserTools(recording))
    assert await agent.execute("tell me a joke") == UNRECOGNIZED
    assert recording.calls == []


async def test_directory_failure_becomes_text():
    agent = FallbackAgent(UserTools(RecordingDirectory(fail=RuntimeError("database is locked"))))
    reply = await agent.execute("list users")
    assert reply == LISTED + "Error: database is locked"


async def test_one_directory_call_per_prompt(recording):
    agent = FallbackAgent(UserTools(recording))
    for prompt in ["register a user", "update id 2 age 3", "delete id 2", "user id 2", "list", "delete all"]:
        recording.calls.clear()
        await agent.execute(prompt)
        assert len(recording.calls) == 1, f"Failed for: {prompt}"


async def test_oversized_numbers_never_raise(recording):
    agent = FallbackAgent(UserTools(recording))
    huge = "1" * 5000

    assert await agent.execute("get user id " + huge) == UNRECOGNIZED
    assert await agent.execute("delete user id " + huge) == UNRECOGNIZED
    assert await agent.execute("update id " + huge + " age 30") == UPDATE_ID_MISSING
    assert recording.calls == []

    await agent.execute("register name is Sam age is " + huge)
    assert recording.calls == [("create", "Sam", 25, "Unknown")]
