"""Tests for UserRepository against an in-memory database."""

from datetime import datetime

from dressla.core.database.entities.catalog import Product
from dressla.core.database.entities.users import User
from dressla.core.models.domain.enums import Role, VerificationStatus


async def _user(repos, email, name="User", role=Role.USER):
    return await repos.users.create(User(email=email, name=name, role=role))


class TestUserLookup:
    async def test_email_lookup_is_case_insensitive(self, repos):
        created = await _user(repos, "Nino@Example.com")

        found = await repos.users.get_by_email("nino@example.COM")

        assert found is not None
        assert found.id == created.id

    async def test_email_taken_excludes_current_user(self, repos):
        user = await _user(repos, "a@example.com")

        assert await repos.users.email_taken("A@example.com")
        assert not await repos.users.email_taken("a@example.com", exclude_user_id=user.id)

    async def test_search_matches_name_or_email(self, repos):
        await _user(repos, "giorgi@example.com", name="Giorgi")
        await _user(repos, "ana@example.com", name="Ana")

        found = await repos.users.list_users(search="GIOR")

        assert [user.name for user in found] == ["Giorgi"]

    async def test_count_by_role(self, repos):
        await _user(repos, "a@example.com", role=Role.ADMIN)
        await _user(repos, "b@example.com")
        await _user(repos, "c@example.com")

        assert await repos.users.count_by_role(Role.USER) == 2
        assert await repos.users.count_by_role(Role.ADMIN) == 1

    async def test_product_counts(self, repos, session):
        seller = await _user(repos, "seller@example.com")
        session.add(Product(name="A", slug="a", user_id=seller.id))
        session.add(Product(name="B", slug="b", user_id=seller.id))
        await session.commit()

        assert await repos.users.product_counts([seller.id]) == {seller.id: 2}
        assert await repos.users.product_counts([]) == {}


class TestVerificationDocuments:
    async def test_upsert_resets_review_state(self, repos, session):
        user = await _user(repos, "seller@example.com")
        document = await repos.users.upsert_verification(user.id, "front.jpg", "back.jpg", None)
        document.identity_status = VerificationStatus.APPROVED
        document.identity_comment = "ok"
        await session.commit()

        updated = await repos.users.upsert_verification(user.id, None, None, "cert.pdf")

        assert updated.id == document.id
        assert updated.id_front_url == "front.jpg"
        assert updated.entrepreneur_certificate_url == "cert.pdf"
        assert updated.identity_status == VerificationStatus.PENDING
        assert updated.identity_comment is None


class TestRegistrationCodes:
    async def test_replacing_drops_earlier_codes(self, repos):
        await repos.users.replace_registration_code("New@Example.com", "AAAAAA", datetime(2026, 1, 1, 10))
        await repos.users.replace_registration_code("new@example.com", "BBBBBB", datetime(2026, 1, 1, 11))

        latest = await repos.users.latest_registration_code("NEW@example.com")

        assert latest.code == "BBBBBB"
        assert latest.email == "new@example.com"

    async def test_delete_codes(self, repos, session):
        await repos.users.replace_registration_code("x@example.com", "AAAAAA", datetime(2026, 1, 1))

        await repos.users.delete_registration_codes("x@example.com")
        await session.commit()

        assert await repos.users.latest_registration_code("x@example.com") is None
