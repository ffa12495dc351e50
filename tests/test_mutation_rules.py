"""Tests for enforce-delete-with-where and enforce-update-with-where."""

import pytest
from conftest import data_values, message_ids

DELETE = "enforce-delete-with-where"
UPDATE = "enforce-update-with-where"


class TestDeleteWithWhere:
    """A delete chain must carry .where(...) after the delete call."""

    @pytest.mark.parametrize(
        "code",
        [
            "const a = db.delete({}).where({});",
            "delete db.something",
            "dataSource\n  .delete()\n  .where()",
            "await db.delete(users).where(eq(users.id, x)).returning();",
        ],
    )
    def test_valid(self, analyze, code):
        assert analyze(code, rule=DELETE) == ()

    @pytest.mark.parametrize(
        "code",
        [
            "db.delete({})",
            "const a = await db.delete({})",
            "const a = db.delete({})",
            "const a = database\n  .delete({})",
        ],
    )
    def test_invalid(self, analyze, code):
        diagnostics = analyze(code, rule=DELETE)
        assert message_ids(diagnostics) == ["enforceDeleteWithWhere"]

    def test_where_before_delete_does_not_count(self, analyze):
        diagnostics = analyze("db.where(x).delete(users)", rule=DELETE)
        assert message_ids(diagnostics) == ["enforceDeleteWithWhere"]

    def test_message_names_receiver(self, analyze):
        diagnostics = analyze("this.db.delete(users);", rule=DELETE)
        assert data_values(diagnostics, "drizzleObjName") == ["this.db"]
        assert "`this.db.delete(...).where(...)`" in diagnostics[0].message

    def test_reported_at_delete_call(self, analyze):
        diagnostics = analyze("\n\nconst a = db.delete(users);", rule=DELETE)
        assert diagnostics[0].line == 3
        assert diagnostics[0].column == len("const a = ")

    def test_drizzle_object_name_filters_receivers(self, analyze):
        code = "db.delete(users);\nlist.delete(item);"
        diagnostics = analyze(code, rule=DELETE, drizzle_object_name=["db"])
        assert len(diagnostics) == 1
        assert diagnostics[0].line == 1

    def test_drizzle_object_name_string_is_accepted(self, analyze):
        code = "db.delete(users);\nlist.delete(item);"
        diagnostics = analyze(code, rule=DELETE, drizzle_object_name="list")
        assert [d.line for d in diagnostics] == [2]


class TestUpdateWithWhere:
    """An update with .set(...) must be followed by .where(...)."""

    @pytest.mark.parametrize(
        "code",
        [
            "const a = db.update({}).set().where({});",
            "const a = db.update();",
            "update()",
            "da\n  .update()\n  .set()\n  .where()",
            "dataSource\n  .update()\n  .set()\n  .where()",
        ],
    )
    def test_valid(self, analyze, code):
        assert analyze(code, rule=UPDATE) == ()

    @pytest.mark.parametrize(
        "code",
        [
            "db.update({}).set()",
            "const a = await db.update({}).set()",
            "const a = db.update({}).set",
            "const a = database\n  .update({})\n  .set()",
        ],
    )
    def test_invalid(self, analyze, code):
        diagnostics = analyze(code, rule=UPDATE)
        assert message_ids(diagnostics) == ["enforceUpdateWithWhere"]

    def test_where_must_follow_set(self, analyze):
        diagnostics = analyze("db.update(users).where(x).set({ a: 1 })", rule=UPDATE)
        assert message_ids(diagnostics) == ["enforceUpdateWithWhere"]

    def test_where_later_in_chain_is_found(self, analyze):
        code = "await db.update(users).set({ name: 'x' }).where(eq(users.id, 1)).returning();"
        assert analyze(code, rule=UPDATE) == ()

    def test_reported_at_set_segment(self, analyze):
        code = "db\n  .update(users)\n  .set({ a: 1 })"
        diagnostics = analyze(code, rule=UPDATE)
        assert diagnostics[0].line == 1
        assert diagnostics[0].data == {"drizzleObjName": "db"}

    def test_drizzle_object_name_filters_receivers(self, analyze):
        code = "db.update(t).set(v);\nmap.update(k).set(v);"
        diagnostics = analyze(code, rule=UPDATE, drizzle_object_name=["map"])
        assert data_values(diagnostics, "drizzleObjName") == ["map"]
