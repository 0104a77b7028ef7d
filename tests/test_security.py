"""
Users, roles, permissions and token authentication.
"""

import uuid

import pytest

from mes_api.core.errors import AlreadyExistsError, AuthenticationError, NotFoundError, ValidationError
from mes_api.core.security import create_access_token, create_refresh_token, decode_token, verify_password
from mes_api.services.audit import AuditLogService
from mes_api.services.security import AuthService, PermissionService, RoleService, UserService

from .conftest import OTHER_TENANT, TENANT


@pytest.mark.asyncio
async def test_create_user_hashes_password_and_assigns_roles(db_session, roles):
    """Passwords are stored hashed and requested roles are attached."""
    service = UserService(db_session)
    user = await service.create(
        TENANT,
        {
            "username": "kim",
            "email": "kim@example.com",
            "password": "s3cret!",
            "role_ids": [roles["OPERATOR"].id, roles["MANAGER"].id],
        },
    )
    assert user.status == "active"
    assert user.password_hash != "s3cret!"
    assert verify_password("s3cret!", user.password_hash)
    assert await service.role_codes(user.id) == ["MANAGER", "OPERATOR"]


@pytest.mark.asyncio
async def test_email_is_unique_across_tenants(db_session, admin_user):
    """The same email cannot be reused, even by another tenant."""
    with pytest.raises(AlreadyExistsError):
        await UserService(db_session).create(
            OTHER_TENANT, {"username": "someone", "email": admin_user.email, "password": "pw1234"}
        )


@pytest.mark.asyncio
async def test_username_is_unique_per_tenant_only(db_session, admin_user):
    """Usernames collide inside a tenant but not across tenants."""
    service = UserService(db_session)
    with pytest.raises(AlreadyExistsError):
        await service.create(TENANT, {"username": "admin", "email": "a2@example.com", "password": "pw1234"})
    other = await service.create(OTHER_TENANT, {"username": "admin", "email": "a3@example.com", "password": "pw1234"})
    assert other.tenant_id == OTHER_TENANT


@pytest.mark.asyncio
async def test_create_user_with_unknown_role_writes_nothing(db_session, roles):
    """A bad role id aborts the whole user creation."""
    service = UserService(db_session)
    with pytest.raises(NotFoundError):
        await service.create(
            TENANT,
            {"username": "ghost", "email": "ghost@example.com", "password": "pw1234", "role_ids": [uuid.uuid4()]},
        )
    with pytest.raises(NotFoundError):
        await service.find_by_username(TENANT, "ghost")


@pytest.mark.asyncio
async def test_change_password(db_session, operator_user):
    """The current password must match before it is replaced."""
    service = UserService(db_session)
    user_id = operator_user.id
    with pytest.raises(ValidationError):
        await service.change_password(TENANT, user_id, "wrong", "newpass1")

    await service.change_password(TENANT, user_id, "operator123", "newpass1")
    user = await service.find_by_id(TENANT, user_id)
    assert verify_password("newpass1", user.password_hash)


@pytest.mark.asyncio
async def test_deactivate_and_activate(db_session, operator_user):
    """Status toggles between active and inactive."""
    service = UserService(db_session)
    assert (await service.deactivate(TENANT, operator_user.id)).status == "inactive"
    assert [u.username for u in await service.find_active(TENANT)] == []
    assert (await service.activate(TENANT, operator_user.id)).status == "active"


@pytest.mark.asyncio
async def test_login_issues_tokens_and_audits(db_session, admin_user):
    """A good login returns both tokens carrying the tenant and roles, and is audited."""
    tokens = await AuthService(db_session).login(TENANT, "admin", "admin123", ip_address="10.0.0.5")
    assert tokens["token_type"] == "bearer"

    claims = decode_token(tokens["access_token"])
    assert claims["sub"] == str(admin_user.id)
    assert claims["tenant_id"] == TENANT
    assert claims["roles"] == ["ADMIN"]
    assert claims["type"] == "access"
    assert decode_token(tokens["refresh_token"])["type"] == "refresh"

    user = await UserService(db_session).find_by_id(TENANT, admin_user.id)
    assert user.last_login_at is not None

    page = await AuditLogService(db_session).search(TENANT, action="LOGIN")
    assert page["total"] == 1
    assert page["items"][0].success is True
    assert page["items"][0].ip_address == "10.0.0.5"


@pytest.mark.asyncio
async def test_failed_login_is_audited(db_session, admin_user):
    """Wrong passwords raise and leave a failed LOGIN entry."""
    with pytest.raises(AuthenticationError):
        await AuthService(db_session).login(TENANT, "admin", "nope")

    page = await AuditLogService(db_session).search(TENANT, action="LOGIN", success=False)
    assert page["total"] == 1
    assert page["items"][0].username == "admin"
    assert page["items"][0].error_message


@pytest.mark.asyncio
async def test_login_is_scoped_to_tenant(db_session, admin_user):
    """A user of one tenant cannot log in through another."""
    with pytest.raises(AuthenticationError):
        await AuthService(db_session).login(OTHER_TENANT, "admin", "admin123")


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(db_session, user_factory):
    """Only active users get tokens."""
    await user_factory("locked", "pw1234", status="locked")
    with pytest.raises(AuthenticationError):
        await AuthService(db_session).login(TENANT, "locked", "pw1234")


@pytest.mark.asyncio
async def test_refresh(db_session, admin_user):
    """Refresh tokens are exchanged for a new pair; access tokens and foreign tenants are refused."""
    service = AuthService(db_session)
    refresh = create_refresh_token(subject=str(admin_user.id), tenant_id=TENANT)

    tokens = await service.refresh(TENANT, refresh)
    assert decode_token(tokens["access_token"])["sub"] == str(admin_user.id)

    with pytest.raises(AuthenticationError):
        await service.refresh(TENANT, create_access_token(subject=str(admin_user.id), tenant_id=TENANT))
    with pytest.raises(AuthenticationError):
        await service.refresh(OTHER_TENANT, refresh)
    with pytest.raises(AuthenticationError):
        await service.refresh(TENANT, "not-a-jwt")


@pytest.mark.asyncio
async def test_role_permissions(db_session, roles):
    """Permissions are granted once, listed per role and can be revoked."""
    permission = await PermissionService(db_session).create(
        {"permission_code": "PRODUCTION_VIEW", "permission_name": "View production", "module": "PRODUCTION"}
    )
    service = RoleService(db_session)
    role_id = roles["OPERATOR"].id
    permission_id = permission.id

    await service.assign_permission(TENANT, role_id, permission_id)
    assert [p.permission_code for p in await service.find_permissions(TENANT, role_id)] == ["PRODUCTION_VIEW"]

    with pytest.raises(AlreadyExistsError):
        await service.assign_permission(TENANT, role_id, permission_id)

    await service.remove_permission(TENANT, role_id, permission_id)
    assert await service.find_permissions(TENANT, role_id) == []
    with pytest.raises(NotFoundError):
        await service.remove_permission(TENANT, role_id, permission_id)


@pytest.mark.asyncio
async def test_permission_codes_are_global(db_session):
    """Permission codes are unique without a tenant."""
    service = PermissionService(db_session)
    await service.create({"permission_code": "REPORT_VIEW", "permission_name": "Export reports", "module": "REPORTS"})
    with pytest.raises(AlreadyExistsError):
        await service.create({"permission_code": "REPORT_VIEW", "permission_name": "Duplicate"})
    assert [p.permission_code for p in await service.find_by_module("REPORTS")] == ["REPORT_VIEW"]


@pytest.mark.asyncio
async def test_deleting_role_drops_its_mappings(db_session, roles, operator_user):
    """Removing a role detaches it from users."""
    service = RoleService(db_session)
    await service.delete(TENANT, roles["OPERATOR"].id)
    assert await UserService(db_session).role_codes(operator_user.id) == []
