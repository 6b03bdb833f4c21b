"""
Unit Tests for manager token resolution and role checks.
"""

from types import SimpleNamespace

import pytest

from modules.vacation.models import Department
from modules.vacation.services.errors import (
    ManagerForbiddenError,
    ManagerUnauthorizedError,
    VacationNotFoundError,
)
from modules.vacation.services.manager_auth import (
    TOKEN_ALPHABET,
    TOKEN_LENGTH,
    ManagerRole,
    ManagerSession,
    ManagerTokens,
    authorize_update,
    ensure_in_scope,
    generate_manager_token,
    load_manager_tokens,
    resolve_manager_session,
    token_setting_key,
)
from modules.vacation.services.store import SettingsStore


def department_manager(department=Department.PRODUCTION) -> ManagerSession:
    return ManagerSession(department, department, ManagerRole.DEPARTMENT_MANAGER)


def super_manager(department=Department.PRODUCTION) -> ManagerSession:
    return ManagerSession(department, Department.ADMINISTRATION, ManagerRole.SUPER_MANAGER)


class TestTokenGeneration:
    def test_generated_token_shape(self):
        token = generate_manager_token()

        assert len(token) == TOKEN_LENGTH
        assert set(token) <= set(TOKEN_ALPHABET)

    def test_tokens_differ(self):
        assert generate_manager_token() != generate_manager_token()

    def test_setting_key(self):
        assert token_setting_key(Department.ADMINISTRATION) == "manager_token_administration"

    def test_tokens_are_read_only(self, manager_tokens):
        with pytest.raises(TypeError):
            manager_tokens.tokens[Department.PRODUCTION] = "other"

    def test_missing_department_token_is_empty(self):
        assert ManagerTokens({}).for_department(Department.PRODUCTION) == ""


class TestLoadManagerTokens:
    @pytest.mark.asyncio
    async def test_generates_and_persists(self, db_session):
        tokens = await load_manager_tokens(db_session)

        settings = SettingsStore(db_session)
        for department in Department:
            token = tokens.for_department(department)
            assert len(token) == TOKEN_LENGTH
            assert await settings.get(token_setting_key(department)) == token

    @pytest.mark.asyncio
    async def test_stored_tokens_survive_restart(self, db_session):
        first = await load_manager_tokens(db_session)
        second = await load_manager_tokens(db_session, {})

        assert dict(first.tokens) == dict(second.tokens)

    @pytest.mark.asyncio
    async def test_override_wins_and_is_persisted(self, db_session):
        await load_manager_tokens(db_session)

        tokens = await load_manager_tokens(
            db_session, {Department.PRODUCTION: "  explicit-production  ", Department.ADMINISTRATION: ""}
        )

        assert tokens.for_department(Department.PRODUCTION) == "explicit-production"
        assert len(tokens.for_department(Department.ADMINISTRATION)) == TOKEN_LENGTH

        restarted = await load_manager_tokens(db_session)
        assert restarted.for_department(Department.PRODUCTION) == "explicit-production"


class TestResolveManagerSession:
    def test_administration_token_on_production_path(self, manager_tokens, administration_token):
        session = resolve_manager_session(manager_tokens, Department.PRODUCTION, administration_token)

        assert session.role is ManagerRole.SUPER_MANAGER
        assert session.department is Department.PRODUCTION
        assert session.manager_department is Department.ADMINISTRATION
        assert session.can_manage_all_departments is True
        assert session.can_edit_signed_request is True

    def test_production_token_on_own_path(self, manager_tokens, production_token):
        session = resolve_manager_session(manager_tokens, Department.PRODUCTION, production_token)

        assert session.role is ManagerRole.DEPARTMENT_MANAGER
        assert session.manager_department is Department.PRODUCTION
        assert session.can_manage_all_departments is False
        assert session.can_edit_signed_request is False

    def test_production_token_on_administration_path(self, manager_tokens, production_token):
        with pytest.raises(ManagerUnauthorizedError):
            resolve_manager_session(manager_tokens, Department.ADMINISTRATION, production_token)

    @pytest.mark.parametrize("supplied", [None, "", "   "])
    def test_missing_token(self, manager_tokens, supplied):
        with pytest.raises(ManagerUnauthorizedError) as exc_info:
            resolve_manager_session(manager_tokens, Department.PRODUCTION, supplied)

        assert exc_info.value.status_code == 401
        assert "required" in exc_info.value.message

    @pytest.mark.parametrize(
        "mangle",
        [lambda token: "wrong", lambda token: token[:-1], lambda token: token + "x", lambda token: "Ąžuolas"],
        ids=["other", "truncated", "extended", "non-ascii"],
    )
    def test_unrecognized_token(self, manager_tokens, production_token, mangle):
        with pytest.raises(ManagerUnauthorizedError):
            resolve_manager_session(manager_tokens, Department.PRODUCTION, mangle(production_token))

    def test_empty_configured_token_never_matches(self):
        tokens = ManagerTokens({Department.PRODUCTION: "", Department.ADMINISTRATION: "admin"})

        with pytest.raises(ManagerUnauthorizedError):
            resolve_manager_session(tokens, Department.PRODUCTION, "anything")

    def test_session_dict(self, manager_tokens, administration_token):
        session = resolve_manager_session(manager_tokens, Department.ADMINISTRATION, administration_token)

        assert session.to_dict() == {
            "department": "administration",
            "manager_department": "administration",
            "manager_role": "administration-super",
            "can_manage_all_departments": True,
            "can_edit_signed_request": True,
        }


class TestScopeAndPermissions:
    def test_in_scope(self):
        vacation = SimpleNamespace(department="production")

        assert ensure_in_scope(department_manager(), vacation) is vacation

    def test_other_department_is_not_found(self):
        vacation = SimpleNamespace(department="administration")

        with pytest.raises(VacationNotFoundError):
            ensure_in_scope(department_manager(), vacation)

    def test_scope_follows_path_for_super_manager(self):
        vacation = SimpleNamespace(department="administration")

        with pytest.raises(VacationNotFoundError):
            ensure_in_scope(super_manager(Department.PRODUCTION), vacation)
        assert ensure_in_scope(super_manager(Department.ADMINISTRATION), vacation) is vacation

    def test_missing_record_is_not_found(self):
        with pytest.raises(VacationNotFoundError):
            ensure_in_scope(super_manager(), None)

    @pytest.mark.parametrize(
        "changes",
        [{"signed_request_received": True}, {"signed_request_received": False}, {"department": "administration"}],
    )
    def test_department_manager_restricted_fields(self, changes):
        with pytest.raises(ManagerForbiddenError) as exc_info:
            authorize_update(department_manager(), changes)

        assert exc_info.value.status_code == 403

    def test_department_manager_ordinary_fields(self):
        authorize_update(
            department_manager(),
            {"employee_name": "X", "status": "approved", "start_date": None, "end_date": None},
        )

    def test_super_manager_may_change_everything(self):
        authorize_update(super_manager(), {"signed_request_received": True, "department": "administration"})
