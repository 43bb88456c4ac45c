"""
Tests for Shop Accounts service.
"""
import pytest

from duka.core.security import hash_password, verify_password
from duka.services.shop_accounts import ensure_owner


class TestPasswords:

    def test_hash_and_verify(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_empty_password_never_verifies(self):
        assert not verify_password("", hash_password("secret123"))


class TestShopAccounts:
    """Test cases for ShopAccounts service."""

    @pytest.mark.asyncio
    async def test_sign_up_creates_shop_and_owner(self, accounts):
        result = await accounts.sign_up("Wanjiru@Duka.test ", "secret123", "Wanjiru")

        assert result["user"]["email"] == "wanjiru@duka.test"
        assert result["shop"]["name"] == "Wanjiru's Shop"
        assert result["role"] == "owner"

    @pytest.mark.asyncio
    async def test_sign_up_rejects_duplicate_email(self, accounts, owner):
        with pytest.raises(ValueError, match="already exists"):
            await accounts.sign_up("AMINA@duka.test", "secret123", "Someone Else")

    @pytest.mark.asyncio
    async def test_sign_up_rejects_short_password(self, accounts):
        with pytest.raises(ValueError, match="at least 6 characters"):
            await accounts.sign_up("short@duka.test", "abc", "Short")

    @pytest.mark.asyncio
    async def test_sign_up_rejects_invalid_email(self, accounts):
        with pytest.raises(ValueError, match="valid email"):
            await accounts.sign_up("not-an-email", "secret123", "Nobody")

    @pytest.mark.asyncio
    async def test_sign_in_and_resolve_session(self, accounts, owner):
        result = await accounts.sign_in("amina@duka.test", "secret123")

        assert result["role"] == "owner"
        assert result["shop"]["name"] == "Amina's Kiosk"

        member = await accounts.get_member(result["session_token"])
        assert member["shop_id"] == owner["shop_id"]
        assert member["user_id"] == owner["user_id"]
        assert member["shop_name"] == "Amina's Kiosk"

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(self, accounts, owner):
        with pytest.raises(ValueError, match="Invalid email or password"):
            await accounts.sign_in("amina@duka.test", "not-the-password")

    @pytest.mark.asyncio
    async def test_sign_in_unknown_email(self, accounts):
        with pytest.raises(ValueError, match="Invalid email or password"):
            await accounts.sign_in("ghost@duka.test", "secret123")

    @pytest.mark.asyncio
    async def test_sign_out_invalidates_session(self, accounts, owner):
        token = (await accounts.sign_in("amina@duka.test", "secret123"))["session_token"]

        assert await accounts.sign_out(token) is True
        assert await accounts.get_member(token) is None

    @pytest.mark.asyncio
    async def test_unknown_session_token(self, accounts):
        assert await accounts.get_member("no-such-token") is None


class TestEmployees:

    @pytest.mark.asyncio
    async def test_create_employee_as_attendant(self, accounts, owner):
        employee = await accounts.create_employee(owner, "brian@duka.test", "secret123", "Brian Kip")

        assert employee["role"] == "attendant"
        assert employee["email"] == "brian@duka.test"

        signed_in = await accounts.sign_in("brian@duka.test", "secret123")
        assert signed_in["role"] == "attendant"
        assert signed_in["shop"]["id"] == owner["shop_id"]

    @pytest.mark.asyncio
    async def test_attendant_cannot_manage_staff(self, accounts, attendant):
        with pytest.raises(PermissionError):
            await accounts.create_employee(attendant, "x@duka.test", "secret123", "X")
        with pytest.raises(PermissionError):
            await accounts.list_employees(attendant)

    @pytest.mark.asyncio
    async def test_list_employees_excludes_owner(self, accounts, owner, attendant):
        employees = await accounts.list_employees(owner)

        assert [e["email"] for e in employees] == ["brian@duka.test"]

    @pytest.mark.asyncio
    async def test_removed_employee_loses_access(self, accounts, owner, attendant):
        token = (await accounts.sign_in("brian@duka.test", "secret123"))["session_token"]
        employee = (await accounts.list_employees(owner))[0]

        assert await accounts.remove_employee(owner, employee["id"]) is True
        assert await accounts.get_member(token) is None
        assert await accounts.list_employees(owner) == []

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, accounts, owner):
        token = (await accounts.sign_in("amina@duka.test", "secret123"))["session_token"]
        member = await accounts.get_member(token)

        with pytest.raises(ValueError, match="cannot be removed"):
            await accounts.remove_employee(owner, member["member_id"])

    @pytest.mark.asyncio
    async def test_remove_unknown_employee(self, accounts, owner):
        with pytest.raises(LookupError):
            await accounts.remove_employee(owner, 999)

    @pytest.mark.asyncio
    async def test_cannot_remove_other_shops_employee(self, accounts, owner, attendant, other_owner):
        employee = (await accounts.list_employees(owner))[0]

        with pytest.raises(LookupError):
            await accounts.remove_employee(other_owner, employee["id"])

    def test_ensure_owner(self):
        ensure_owner({"role": "owner"})
        with pytest.raises(PermissionError):
            ensure_owner({"role": "attendant"})
