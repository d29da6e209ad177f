"""
Renders tool output as human-readable text.

Tool output may be a JSON record, a JSON list of records, a JSON message
object, or plain text, and records may use camelCase or PascalCase keys.
"""

import json
import logging
from typing import Any, Mapping, Tuple, Union

logger = logging.getLogger("formatter")

NO_USERS = "No users found."
MISSING = "N/A"

Content = Union[str, list, dict]


def casing_variants(key: str) -> Tuple[str, ...]:
    """Ordered key spellings to probe: as given, then first letter upper-cased."""
    if not key:
        return (key,)
    pascal = key[0].upper() + key[1:]
    return (key,) if pascal == key else (key, pascal)


def read_field(record: Mapping[str, Any], key: str, default: Any = None) -> Any:
    for variant in casing_variants(key):
        if variant in record:
            return record[variant]
    return default


def has_field(record: Mapping[str, Any], key: str) -> bool:
    return any(variant in record for variant in casing_variants(key))


def _display(value: Any) -> str:
    if value is None:
        return MISSING
    text = str(value)
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text.strip('"')
    return text


def format_user(record: Mapping[str, Any]) -> str:
    return "User [ID: {}] Name: {}, Age: {}, Job: {}".format(
        _display(read_field(record, "id")),
        _display(read_field(record, "name")),
        _display(read_field(record, "age")),
        _display(read_field(record, "jobTitle")),
    )


def format_result(content: Content) -> str:
    """
    Format a tool result for display.

    Args:
        content: Raw tool text, or an already decoded list/dict

    Returns:
        One line per record for lists ("No users found." when empty), a single
        record line, a message object's text, or the content unchanged when it
        is not structured.
    """
    if isinstance(content, str):
        try:
            data = json.loads(content)
        except ValueError:
            # plain-text tool replies such as "User deleted successfully."
            return content
    else:
        data = content

    if isinstance(data, list):
        lines = [format_user(item) if isinstance(item, Mapping) else _display(item) for item in data]
        return "\n".join(lines) if lines else NO_USERS

    if isinstance(data, Mapping):
        if has_field(data, "id"):
            return format_user(data)
        message = read_field(data, "message")
        if message is not None:
            return message if isinstance(message, str) else _display(message)

    logger.debug("Unstructured tool result, passing through")
    return content if isinstance(content, str) else json.dumps(content, ensure_ascii=False)
