from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    REGISTER = "register"
    UPDATE = "update"
    DELETE = "delete"
    GET_BY_ID = "get_by_id"
    LIST = "list"
    DELETE_ALL = "delete_all"
    UNRECOGNIZED = "unrecognized"


@dataclass(slots=True)
class Slots:
    name: Optional[str] = None
    age: Optional[int] = None
    job_title: Optional[str] = None
    id: Optional[int] = None


@dataclass(slots=True)
class NLUResult:
    intent: Intent = Intent.UNRECOGNIZED
    slots: Slots = field(default_factory=Slots)
    original_text: str = ""
