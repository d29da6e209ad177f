from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


# Directory record
@dataclass(slots=True)
class User:
    id: int
    name: str
    age: int
    job_title: str
    created_at: str = field(default_factory=utc_now)
    updated_at: Optional[str] = None

    def dict(self) -> dict[str, Any]:
        """Serialize with the camelCase field names used on the wire."""
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "jobTitle": self.job_title,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# Conversational envelope returned by /api/agent/converse
@dataclass(slots=True)
class AgentResponse:
    success: bool = True
    message: str = ""
    execution_time_ms: int = 0

    def dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "success": data["success"],
            "message": data["message"],
            "executionTimeMs": data["execution_time_ms"],
        }
