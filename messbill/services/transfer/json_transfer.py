"""
Member List Import/Export

The member list travels as a JSON array of member objects, the same
shape that is downloaded as `mess-members.json`:

    [{"name": "Rahim", "meals": 30, "deposits": 1000, "guest": 0,
      "fine": 0, "isGuest": false}]

Only the structure is checked on import. Where a file came from is
not our concern.
"""

import json
from typing import Union

from pydantic import ValidationError

from messbill.models.mess import Member


EXPORT_FILENAME = "mess-members.json"


class ImportFormatError(Exception):
    """The imported file is not a valid member list."""
    pass


def export_members(members: list[Member]) -> str:
    """Serialize members to a pretty-printed JSON array."""
    return json.dumps(
        [m.model_dump(mode="json", by_alias=True) for m in members],
        indent=2,
        ensure_ascii=False,
    )


def import_members(data: Union[str, bytes]) -> list[Member]:
    """
    Parse a member list produced by `export_members`.

    Raises:
        ImportFormatError: Not JSON, not an array, or an element that
            is not a valid member
    """
    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportFormatError("Failed to import data") from e

    if not isinstance(parsed, list):
        raise ImportFormatError("Invalid file format")

    members = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise ImportFormatError(f"Invalid file format: entry {index} is not an object")
        try:
            members.append(Member.model_validate(item))
        except ValidationError as e:
            raise ImportFormatError(f"Invalid member at entry {index}: {e}") from e

    return members
