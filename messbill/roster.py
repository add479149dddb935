"""
Member Roster

Owns the in-memory member list between calculations. The calculator
receives a copy and never writes back.

Name rules:
- Surrounding whitespace is stripped
- Names must not be empty
- Names are unique, compared case-insensitively
"""

from typing import Any, Iterable, Iterator, Optional

from pydantic import ValidationError

from messbill.models.mess import Member


EDITABLE_FIELDS = frozenset({
    "meals",
    "deposits",
    "guest",
    "fine",
    "is_guest_only",
    "email",
})


class RosterError(Exception):
    """Base exception for roster operations."""
    pass


class InvalidMemberError(RosterError):
    """Member data failed validation."""
    pass


class DuplicateMemberError(RosterError):
    """A member with the same name (ignoring case) already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("Member already exists")


class MemberNotFoundError(RosterError):
    """No member with the given name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Member not found: {name}")


class Roster:
    """Ordered, name-unique list of members."""

    def __init__(self, members: Optional[Iterable[Member]] = None):
        self._members: list[Member] = []
        if members is not None:
            self.replace_all(members)

    @property
    def members(self) -> list[Member]:
        """A copy of the current members, in insertion order."""
        return list(self._members)

    @property
    def billable_count(self) -> int:
        return sum(1 for m in self._members if not m.is_guest_only)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Member]:
        return iter(list(self._members))

    def get(self, name: str) -> Optional[Member]:
        for member in self._members:
            if member.name == name:
                return member
        return None

    def contains_name(self, name: str) -> bool:
        key = name.strip().lower()
        return any(m.name.lower() == key for m in self._members)

    def add(
        self,
        name: str,
        is_guest_only: bool = False,
        email: Optional[str] = None,
    ) -> Member:
        """
        Add a new member with zero meals, deposits, guest charges and fine.

        Raises:
            InvalidMemberError: Name empty or data invalid
            DuplicateMemberError: Name already on the roster
        """
        if not name or not name.strip():
            raise InvalidMemberError("Please enter a member name")
        if self.contains_name(name):
            raise DuplicateMemberError(name.strip())

        member = self._build({
            "name": name,
            "is_guest_only": is_guest_only,
            "email": email,
        })
        self._members.append(member)
        return member

    def remove(self, name: str) -> Member:
        """Remove a member by exact name."""
        for index, member in enumerate(self._members):
            if member.name == name:
                return self._members.pop(index)
        raise MemberNotFoundError(name)

    def update(self, name: str, **fields: Any) -> Member:
        """
        Update editable fields of a member.

        The name itself cannot be changed here; remove and re-add instead.
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise InvalidMemberError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}"
            )

        for index, member in enumerate(self._members):
            if member.name == name:
                updated = self._build({**member.model_dump(), **fields})
                self._members[index] = updated
                return updated

        raise MemberNotFoundError(name)

    def replace_all(self, members: Iterable[Member]) -> None:
        """Replace the whole roster (used by import and load)."""
        incoming = list(members)
        seen: set[str] = set()
        for member in incoming:
            key = member.name.lower()
            if key in seen:
                raise DuplicateMemberError(member.name)
            seen.add(key)
        self._members = incoming

    @staticmethod
    def _build(data: dict) -> Member:
        try:
            return Member.model_validate(data)
        except ValidationError as e:
            raise InvalidMemberError(str(e)) from e
