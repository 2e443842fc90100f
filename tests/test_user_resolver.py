"""User resolver: lazy creation, placeholders and the concurrent-insert path."""

from sqlalchemy import func, select

from app.core.identity import ExternalIdentity
from app.crud import user as crud_user
from app.crud.user import build_user_fields, resolve_user
from app.models import User


async def _count_users(session_factory, external_id):
    async with session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(User).where(User.external_id == external_id)
        )
        return result.scalar_one()


async def test_resolve_creates_user_on_first_sight(test_db, test_session_factory):
    identity = ExternalIdentity("user_new", first_name="Grace", last_name="Mensah", primary_email="grace@example.org")

    user = await resolve_user(identity, test_db)

    assert user.external_id == "user_new"
    assert user.name == "Grace Mensah"
    assert user.email == "grace@example.org"
    assert await _count_users(test_session_factory, "user_new") == 1


async def test_resolving_twice_returns_the_same_row(test_db, test_session_factory):
    identity = ExternalIdentity("user_twice", username="twice")

    first = await resolve_user(identity, test_db)
    second = await resolve_user(identity, test_db)

    assert first.id == second.id
    assert await _count_users(test_session_factory, "user_twice") == 1


async def test_profile_loader_only_runs_for_new_users(test_db):
    calls = []

    async def loader(identity):
        calls.append(identity.external_id)
        return ExternalIdentity(identity.external_id, username="from-provider")

    user = await resolve_user(ExternalIdentity("user_loaded"), test_db, profile_loader=loader)
    await resolve_user(ExternalIdentity("user_loaded"), test_db, profile_loader=loader)

    assert user.name == "from-provider"
    assert calls == ["user_loaded"]


def test_placeholders_when_provider_profile_is_incomplete():
    fields = build_user_fields(ExternalIdentity("user_bare"))

    assert fields["name"].startswith("User")
    assert fields["name"][4:].isdigit()
    assert fields["email"] == "user_bare@example.com"
    assert fields["avatar_url"] is None


def test_username_is_used_when_full_name_is_missing():
    fields = build_user_fields(ExternalIdentity("user_x", first_name="Only", username="only_first"))
    assert fields["name"] == "only_first"


async def test_unique_violation_on_insert_rereads_existing_row(test_db, test_session_factory, monkeypatch):
    # Another request wins the race: the row exists, but our first lookup missed it
    async with test_session_factory() as other:
        winner = User(external_id="user_race", name="Winner", email="winner@example.org")
        other.add(winner)
        await other.commit()
        winner_id = winner.id

    real_lookup = crud_user.get_user_by_external_id
    lookups = []

    async def stale_first_lookup(external_id, db):
        lookups.append(external_id)
        if len(lookups) == 1:
            return None
        return await real_lookup(external_id, db)

    monkeypatch.setattr(crud_user, "get_user_by_external_id", stale_first_lookup)

    user = await resolve_user(ExternalIdentity("user_race", username="loser"), test_db)

    assert user.id == winner_id
    assert user.name == "Winner"
    assert len(lookups) == 2
    assert await _count_users(test_session_factory, "user_race") == 1
