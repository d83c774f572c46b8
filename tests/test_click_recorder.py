"""
Tests for referral link click recording.
"""

from datetime import timedelta

from sqlalchemy import func, select

from src.models import LinkClick
from src.schemas.click import ClickMetadata
from src.services.click_recorder import is_unique_click, record_link_click


class TestRecordLinkClick:

    async def test_stores_normalized_hints(self, db_session, factory, now):
        jane = await factory.profile("janesmith")
        link = await factory.link(jane)

        click = await record_link_click(
            db_session,
            link.id,
            ClickMetadata(
                ip="203.0.113.7",
                user_agent="Mozilla/5.0",
                email="  Lead@Example.COM ",
                phone="+1 (555) 123-4567",
            ),
            clicked_at=now,
        )

        assert click is not None
        assert click.link_id == link.id
        assert click.user_email == "lead@example.com"
        assert click.user_phone == "15551234567"
        assert click.ip_address == "203.0.113.7"

    async def test_malformed_hints_not_stored(self, db_session, factory, now):
        jane = await factory.profile("janesmith")
        link = await factory.link(jane)

        click = await record_link_click(
            db_session,
            link.id,
            ClickMetadata(email="nope", phone="12"),
            clicked_at=now,
        )

        assert click.user_email is None
        assert click.user_phone is None

    async def test_counters(self, db_session, factory, now):
        jane = await factory.profile("janesmith")
        link = await factory.link(jane)
        metadata = ClickMetadata(ip="203.0.113.7")

        await record_link_click(db_session, link.id, metadata, clicked_at=now)
        await record_link_click(
            db_session, link.id, metadata, clicked_at=now + timedelta(minutes=5)
        )
        await record_link_click(
            db_session, link.id, ClickMetadata(ip="198.51.100.1"),
            clicked_at=now + timedelta(minutes=6),
        )

        await db_session.refresh(link)
        assert link.clicks == 3
        assert link.unique_clicks == 2

    async def test_unknown_link(self, db_session):
        click = await record_link_click(db_session, 999, ClickMetadata(ip="203.0.113.7"))

        assert click is None
        count = await db_session.scalar(select(func.count(LinkClick.id)))
        assert count == 0

    async def test_store_error_swallowed(self, broken_session):
        click = await record_link_click(broken_session, 1, ClickMetadata(ip="203.0.113.7"))

        assert click is None
        assert broken_session.rolled_back


class TestIsUniqueClick:

    async def test_first_click(self, db_session, factory, now):
        link = await factory.link(await factory.profile("janesmith"))

        assert await is_unique_click(db_session, link.id, "203.0.113.7", now)

    async def test_repeat_within_window(self, db_session, factory, now):
        link = await factory.link(await factory.profile("janesmith"))
        await factory.click(link, now - timedelta(hours=23), ip="203.0.113.7")

        assert not await is_unique_click(db_session, link.id, "203.0.113.7", now)

    async def test_repeat_after_window(self, db_session, factory, now):
        link = await factory.link(await factory.profile("janesmith"))
        await factory.click(link, now - timedelta(hours=30), ip="203.0.113.7")

        assert await is_unique_click(db_session, link.id, "203.0.113.7", now)

    async def test_same_ip_other_link(self, db_session, factory, now):
        jane = await factory.profile("janesmith")
        first = await factory.link(jane)
        second = await factory.link(jane)
        await factory.click(first, now - timedelta(hours=1), ip="203.0.113.7")

        assert await is_unique_click(db_session, second.id, "203.0.113.7", now)

    async def test_no_ip(self, db_session, factory, now):
        link = await factory.link(await factory.profile("janesmith"))

        assert await is_unique_click(db_session, link.id, None, now)
