"""
Tests for member list import and export.
"""

import json

import pytest

from messbill.models.mess import Member
from messbill.services.transfer import (
    EXPORT_FILENAME,
    ImportFormatError,
    export_members,
    import_members,
)


class TestExport:
    """Tests for export_members."""

    def test_export_shape(self):
        """Test the exported file is a JSON array using isGuest."""
        exported = export_members([
            Member(name="Rahim", meals=30, deposits=1000),
            Member(name="Guest", guest=150, is_guest_only=True),
        ])
        data = json.loads(exported)
        assert isinstance(data, list)
        assert data[0]["name"] == "Rahim"
        assert data[0]["isGuest"] is False
        assert data[1]["isGuest"] is True
        assert EXPORT_FILENAME == "mess-members.json"

    def test_export_empty(self):
        assert json.loads(export_members([])) == []

    def test_export_then_import(self):
        members = [Member(name="Süleyman", meals=12.5, email="s@example.com")]
        assert import_members(export_members(members)) == members


class TestImport:
    """Tests for import_members."""

    def test_import_shared_file(self):
        """Test a member file using the isGuest key."""
        data = (
            '[{"name": "Rahim", "meals": 30, "deposits": 1000, '
            '"guest": 0, "fine": 0, "isGuest": false}, '
            '{"name": "Guest", "meals": 0, "deposits": 0, '
            '"guest": 200, "fine": 0, "isGuest": true}]'
        )
        members = import_members(data.encode("utf-8"))
        assert [m.name for m in members] == ["Rahim", "Guest"]
        assert members[1].is_guest_only is True

    def test_not_json(self):
        with pytest.raises(ImportFormatError, match="Failed to import data"):
            import_members("hello")

    def test_not_a_list(self):
        with pytest.raises(ImportFormatError, match="^Invalid file format$"):
            import_members('{"name": "Rahim"}')

    def test_element_not_an_object(self):
        with pytest.raises(ImportFormatError, match="entry 1 is not an object"):
            import_members('[{"name": "A"}, "B"]')

    def test_invalid_member(self):
        with pytest.raises(ImportFormatError, match="Invalid member at entry 0"):
            import_members('[{"name": "A", "meals": -3}]')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
