"""Tests for require-rls-enabled and prevent-rls-bypass."""

import pytest
from conftest import data_values, message_ids

RLS_REQUIRED = "require-rls-enabled"
RLS_BYPASS = "prevent-rls-bypass"

USERS_TABLE = """const users = pgTable('users', {
  id: uuid('id'),
  email: text('email'),
});"""

ENABLE_USERS = "sql`ALTER TABLE users ENABLE ROW LEVEL SECURITY`;"

POLICY_USERS = 'sql`CREATE POLICY "own rows" ON users USING (id = auth.uid())`;'


# =============================================================================
# REQUIRE RLS ENABLED
# =============================================================================
class TestRLSRequired:
    @pytest.mark.parametrize(
        ("code", "options"),
        [
            ("const posts = pgTable('posts', {\n  id: uuid('id'),\n  title: text('title'),\n})", {}),
            ("const categories = pgTable('categories', {\n  id: uuid('id'),\n  name: text('name'),\n})", {}),
            (
                "const logs = pgTable('logs', {\n  id: uuid('id'),\n  message: text('message'),\n})",
                {"sensitive_tables": ["users", "accounts"]},
            ),
        ],
    )
    def test_valid(self, analyze, code, options):
        assert analyze(code, rule=RLS_REQUIRED, **options) == ()

    def test_sensitive_table_without_rls(self, analyze):
        diagnostics = analyze(USERS_TABLE, rule=RLS_REQUIRED)
        assert message_ids(diagnostics) == ["missingRLS"]
        assert diagnostics[0].data == {"table": "users"}
        assert "sql`ALTER TABLE users ENABLE ROW LEVEL SECURITY`" in diagnostics[0].message

    def test_multiple_sensitive_tables_in_declaration_order(self, analyze):
        code = """const accounts = pgTable('accounts', { id: uuid('id') });
        const user_profiles = pgTable('user_profiles', { id: uuid('id') });
        const payment_methods = pgTable('payment_methods', { id: uuid('id') });"""
        diagnostics = analyze(code, rule=RLS_REQUIRED)
        assert data_values(diagnostics, "table") == ["accounts", "user_profiles", "payment_methods"]

    def test_explicit_table_list(self, analyze):
        code = "const customers = pgTable('customers', { id: uuid('id') })"
        diagnostics = analyze(code, rule=RLS_REQUIRED, sensitive_tables=["customers", "orders"])
        assert data_values(diagnostics, "table") == ["customers"]

    @pytest.mark.parametrize("table", ["medical_history", "auth_sessions", "Payment_Log"])
    def test_pattern_matching(self, analyze, table):
        code = f"const t = pgTable('{table}', {{ id: uuid('id') }})"
        assert data_values(analyze(code, rule=RLS_REQUIRED), "table") == [table]

    def test_ignore_tables(self, analyze):
        assert analyze(USERS_TABLE, rule=RLS_REQUIRED, ignore_tables=["users"]) == ()

    def test_explicit_list_wins_over_ignore_list(self, analyze):
        diagnostics = analyze(
            USERS_TABLE, rule=RLS_REQUIRED, sensitive_tables=["users"], ignore_tables=["users"]
        )
        assert message_ids(diagnostics) == ["missingRLS"]

    def test_custom_patterns(self, analyze):
        code = "const t = pgTable('invoices', { id: uuid('id') })"
        assert analyze(code, rule=RLS_REQUIRED, sensitive_patterns=["secret"]) == ()

    def test_rls_enabled_without_policy(self, analyze):
        diagnostics = analyze(USERS_TABLE + "\n" + ENABLE_USERS, rule=RLS_REQUIRED)
        assert message_ids(diagnostics) == ["missingPolicy"]

    def test_rls_and_policy(self, analyze):
        code = "\n".join([USERS_TABLE, ENABLE_USERS, POLICY_USERS])
        assert analyze(code, rule=RLS_REQUIRED) == ()

    def test_declaration_order_does_not_matter(self, analyze):
        before = analyze(ENABLE_USERS + "\n" + USERS_TABLE, rule=RLS_REQUIRED)
        after = analyze(USERS_TABLE + "\n" + ENABLE_USERS, rule=RLS_REQUIRED)
        assert message_ids(before) == message_ids(after) == ["missingPolicy"]
        assert before[0].data == after[0].data

    def test_quoted_name_and_mixed_case_statement(self, analyze):
        code = USERS_TABLE + '\nsql`alter table "users" enable row level security`;\n' + POLICY_USERS
        assert analyze(code, rule=RLS_REQUIRED) == ()

    def test_every_statement_in_one_template_is_captured(self, analyze):
        code = (
            USERS_TABLE
            + "\nconst accounts = pgTable('accounts', { id: uuid('id') });\n"
            + "sql`ALTER TABLE users ENABLE ROW LEVEL SECURITY; ALTER TABLE accounts ENABLE ROW LEVEL SECURITY;`;"
        )
        diagnostics = analyze(code, rule=RLS_REQUIRED)
        assert message_ids(diagnostics) == ["missingPolicy", "missingPolicy"]

    def test_interpolations_are_opaque(self, analyze):
        code = USERS_TABLE + "\nsql`ALTER TABLE users ENABLE ROW LEVEL SECURITY ${extra}`;"
        assert message_ids(analyze(code, rule=RLS_REQUIRED)) == ["missingPolicy"]

    def test_with_rls_variant(self, analyze):
        code = "const users = pgTable.withRLS('users', { id: uuid('id') });"
        assert message_ids(analyze(code, rule=RLS_REQUIRED)) == ["missingPolicy"]

    def test_enable_rls_segment(self, analyze):
        code = "const users = pgTable('users', { id: uuid('id') }).enableRLS();"
        assert message_ids(analyze(code, rule=RLS_REQUIRED)) == ["missingPolicy"]

    def test_policy_in_extra_builder(self, analyze):
        code = """const users = pgTable('users', { id: uuid('id') }, (t) => [
          pgPolicy('users_read_own', { for: 'select' }),
        ]).enableRLS();"""
        assert analyze(code, rule=RLS_REQUIRED) == ()

    def test_reported_at_table_call(self, analyze):
        diagnostics = analyze("\n" + USERS_TABLE, rule=RLS_REQUIRED)
        assert diagnostics[0].line == 2
        assert diagnostics[0].column == len("const users = ")


# =============================================================================
# PREVENT RLS BYPASS
# =============================================================================
class TestRLSBypass:
    @pytest.mark.parametrize("prop", ["serviceRole", "adminClient", "serviceClient", "bypassRLS"])
    def test_bypass_properties(self, analyze, prop):
        diagnostics = analyze(f"const c = supabase.{prop};", rule=RLS_BYPASS)
        assert message_ids(diagnostics) == ["bypassDetected"]
        assert diagnostics[0].data == {"method": prop}

    @pytest.mark.parametrize(
        "comment",
        [
            "// migration: backfill runs outside tenant context",
            "// MIGRATION",
            "/* nightly cron cleanup */",
            "// admin dashboard needs every row",
            "// RLS bypass approved",
            "// runs as a background job",
        ],
    )
    def test_justification_comment_silences(self, analyze, comment):
        code = f"{comment}\nconst c = supabase.serviceRole;"
        assert analyze(code, rule=RLS_BYPASS) == ()

    def test_unrelated_comment_does_not_silence(self, analyze):
        code = "// fetch the data\nconst c = supabase.serviceRole;"
        assert message_ids(analyze(code, rule=RLS_BYPASS)) == ["bypassDetected"]

    def test_comment_before_other_statement_does_not_count(self, analyze):
        code = "// migration\nconst a = 1;\nconst c = supabase.serviceRole;"
        assert message_ids(analyze(code, rule=RLS_BYPASS)) == ["bypassDetected"]

    def test_comment_inside_function_body(self, analyze):
        code = """async function run() {
          // system operation: reindex
          await db.serviceClient.from('users').select();
        }"""
        assert analyze(code, rule=RLS_BYPASS) == ()

    def test_rls_bypass_chain_needs_comment(self, analyze):
        diagnostics = analyze("await db.rls().bypass().select();", rule=RLS_BYPASS)
        assert message_ids(diagnostics) == ["missingRLSComment"]

    def test_rls_bypass_chain_with_comment(self, analyze):
        code = "// security review: exporter needs all tenants\nawait db.rls().bypass().select();"
        assert analyze(code, rule=RLS_BYPASS) == ()

    def test_service_role_client(self, analyze):
        code = "const admin = createClient(url, { auth: { autoRefreshToken: false } });"
        diagnostics = analyze(code, rule=RLS_BYPASS)
        assert diagnostics[0].data == {"method": "service role client"}

    def test_service_role_client_member_callee(self, analyze):
        code = "const admin = supabaseJs.createClient(url, { auth: { autoRefreshToken: false } });"
        assert message_ids(analyze(code, rule=RLS_BYPASS)) == ["bypassDetected"]

    @pytest.mark.parametrize(
        "code",
        [
            "const c = createClient(url, { auth: { autoRefreshToken: true } });",
            "const c = createClient(url, key);",
            "const c = createClient(url, { db: { schema: 'public' } });",
            "const c = createClient(url, key, { auth: { autoRefreshToken: false } });",
        ],
    )
    def test_regular_client(self, analyze, code):
        assert analyze(code, rule=RLS_BYPASS) == ()

    def test_security_definer(self, analyze):
        code = "sql`CREATE FUNCTION f() RETURNS void LANGUAGE sql SECURITY DEFINER AS $$ SELECT 1 $$`;"
        diagnostics = analyze(code, rule=RLS_BYPASS)
        assert diagnostics[0].data == {"method": "SECURITY DEFINER"}

    def test_security_definer_with_comment(self, analyze):
        code = "// migration helper\nsql`CREATE FUNCTION f() RETURNS void SECURITY   DEFINER AS $$ $$`;"
        assert analyze(code, rule=RLS_BYPASS) == ()
