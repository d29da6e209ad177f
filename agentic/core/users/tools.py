"""
String-returning user tools.

Both the model's tool-calling loop and the fallback router call the user
directory through these functions, so every caller sees the same text:
a JSON record, a JSON list, a plain status message, or "Error: ...".
"""

import json
import logging
from typing import Any, Dict, List, Optional

from agentic.core.users.directory import UserDirectory

logger = logging.getLogger("user_tools")

PLUGIN_NAME = "UserApi"


def _function(name: str, description: str, properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": f"{PLUGIN_NAME}-{name}",
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


_ID = {"type": "integer", "description": "The ID of the user."}

# OpenAI-compatible function schemas advertised to the model
TOOL_SPECS: List[Dict[str, Any]] = [
    _function(
        "RegisterUser",
        "Registers a new user in the system.",
        {
            "name": {"type": "string", "description": "The full name of the user."},
            "age": {"type": "integer", "description": "The age of the user in years."},
            "jobTitle": {"type": "string", "description": "The user's job title."},
        },
        ["name", "age", "jobTitle"],
    ),
    _function(
        "UpdateUser",
        "Updates an existing user's information.",
        {
            "id": _ID,
            "name": {"type": "string", "description": "The user's new name."},
            "age": {"type": "integer", "description": "The user's new age."},
            "jobTitle": {"type": "string", "description": "The user's new job title."},
        },
        ["id"],
    ),
    _function("DeleteUser", "Deletes a user from the system.", {"id": _ID}, ["id"]),
    _function("DeleteAllUsers", "Deletes ALL users from the system. Use with extreme caution.", {}, []),
    _function(
        "GetAllUsers",
        "Retrieves a list of all users, with optional filtering.",
        {
            "jobTitleFilter": {"type": "string", "description": "Filter users by job title."},
            "minAge": {"type": "integer", "description": "The minimum age to filter by."},
            "maxAge": {"type": "integer", "description": "The maximum age to filter by."},
        },
        [],
    ),
    _function("GetUserById", "Retrieves a specific user by their ID.", {"id": _ID}, ["id"]),
]


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


def _as_int(value: Any) -> Optional[int]:
    # models sometimes send numbers as strings
    if value is None or value == "":
        return None
    return int(value)


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class UserTools:
    """
    Tool surface over a UserDirectory.

    Usage:
        tools = UserTools(directory)
        text = await tools.GetUserById(3)
        text = await tools.invoke("UserApi-GetUserById", {"id": 3})
    """

    def __init__(self, directory: UserDirectory):
        self.directory = directory

    async def RegisterUser(self, name: str, age: int, jobTitle: str) -> str:
        try:
            user = await self.directory.create(name, age, jobTitle)
            return _dumps(user.dict())
        except Exception as e:
            logger.exception("Error registering user")
            return f"Error: {e}"

    async def UpdateUser(
        self,
        id: int,
        name: Optional[str] = None,
        age: Optional[int] = None,
        jobTitle: Optional[str] = None,
    ) -> str:
        try:
            user = await self.directory.update(id, name=name, age=age, job_title=jobTitle)
            return _dumps(user.dict()) if user is not None else f"User with ID {id} not found."
        except Exception as e:
            logger.exception("Error updating user")
            return f"Error: {e}"

    async def DeleteUser(self, id: int) -> str:
        try:
            deleted = await self.directory.delete(id)
            return "User deleted successfully." if deleted else f"User with ID {id} not found."
        except Exception as e:
            logger.exception("Error deleting user")
            return f"Error: {e}"

    async def DeleteAllUsers(self) -> str:
        try:
            count = await self.directory.delete_all()
            return f"All {count} users deleted successfully."
        except Exception as e:
            logger.exception("Error deleting all users")
            return f"Error: {e}"

    async def GetAllUsers(
        self,
        jobTitleFilter: Optional[str] = None,
        minAge: Optional[int] = None,
        maxAge: Optional[int] = None,
    ) -> str:
        try:
            users = await self.directory.list(jobTitleFilter, minAge, maxAge)
            return _dumps([user.dict() for user in users])
        except Exception as e:
            logger.exception("Error getting users")
            return f"Error: {e}"

    async def GetUserById(self, id: int) -> str:
        try:
            user = await self.directory.get_by_id(id)
            return _dumps(user.dict()) if user is not None else f"User with ID {id} not found."
        except Exception as e:
            logger.exception("Error getting user by ID")
            return f"Error: {e}"

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Invoke a tool by its advertised name with model-supplied arguments.

        Args:
            name: Tool name, with or without the "UserApi-" prefix
            arguments: Decoded JSON arguments from the model

        Returns:
            Tool output text; argument problems come back as "Error: ..."
        """
        args = arguments or {}
        short = name.split("-", 1)[1] if name.startswith(f"{PLUGIN_NAME}-") else name
        logger.info("Invoking tool %s with %s", short, args)
        try:
            if short == "RegisterUser":
                return await self.RegisterUser(str(args["name"]), _as_int(args["age"]), str(args["jobTitle"]))
            if short == "UpdateUser":
                return await self.UpdateUser(
                    _as_int(args["id"]),
                    _as_str(args.get("name")),
                    _as_int(args.get("age")),
                    _as_str(args.get("jobTitle")),
                )
            if short == "DeleteUser":
                return await self.DeleteUser(_as_int(args["id"]))
            if short == "DeleteAllUsers":
                return await self.DeleteAllUsers()
            if short == "GetAllUsers":
                return await self.GetAllUsers(
                    _as_str(args.get("jobTitleFilter")),
                    _as_int(args.get("minAge")),
                    _as_int(args.get("maxAge")),
                )
            if short == "GetUserById":
                return await self.GetUserById(_as_int(args["id"]))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Bad arguments for tool %s: %s", short, e)
            return f"Error: Invalid arguments for {short}: {e}"
        return f"Error: Unknown tool '{name}'"
