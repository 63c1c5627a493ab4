import asyncio
import json
from datetime import date
from unittest.mock import AsyncMock

import aiohttp
import pytest

from storyfeed.core.api.base import FetchError, ParseError
from storyfeed.core.dto.feed import ByDate, ByProfile, format_date_key
from storyfeed.core.sources import (
    CursorApiSource,
    DateBucketSource,
    ProfileListSource,
    owner_from_path,
)

from .conftest import FakeHttpClient, FakeResponse, FakeSession


DAY = ByDate(date(2024, 3, 5))
ACME = ByProfile("acme")


def test_date_key_format():
    assert format_date_key(date(2024, 3, 5)) == "05.03.24"
    assert format_date_key(date(2009, 12, 31)) == "31.12.09"


def test_owner_from_path():
    assert owner_from_path("stories/acme/2024-03-05 at 10.15.30 PM.jpg") == "acme"
    assert owner_from_path("loose-file.jpg") == ""


class TestFlatListSources:
    @pytest.mark.asyncio
    async def test_date_bucket_url_and_owner(self, mocker):
        source = DateBucketSource(base_url="https://example.test/storiesJson/")
        fetch = mocker.patch.object(
            source, "_fetch_json",
            AsyncMock(return_value={"files": ["stories/acme/a.jpg", "stories/bob/b.mp4"]}),
        )

        page = await source.fetch_page(DAY, None, 10)

        fetch.assert_awaited_once_with("https://example.test/storiesJson/05.03.24.json")
        assert [(i.url, i.owner_label, i.kind) for i in page.items] == [
            ("stories/bob/b.mp4", "bob", "video"),
            ("stories/acme/a.jpg", "acme", "photo"),
        ]
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_offsets_slice_the_cached_list(self, mocker):
        source = ProfileListSource(base_url="https://example.test")
        files = [f"stories/acme/{i}.jpg" for i in range(5)]
        fetch = mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"files": files}))

        first = await source.fetch_page(ACME, None, 2)
        second = await source.fetch_page(ACME, first.cursor, 2)
        third = await source.fetch_page(ACME, second.cursor, 2)

        assert fetch.await_count == 1
        assert (first.cursor, second.cursor, third.cursor) == (2, 4, None)
        assert [i.url for i in first.items + second.items + third.items] == list(reversed(files))
        assert all(i.owner_label == "acme" for i in first.items)

    @pytest.mark.asyncio
    async def test_exact_multiple_ends_without_extra_page(self, mocker):
        source = ProfileListSource(base_url="https://example.test")
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"files": ["a/b/1.jpg", "a/b/2.jpg"]}))

        page = await source.fetch_page(ACME, None, 2)

        assert len(page.items) == 2
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self, mocker):
        source = ProfileListSource(base_url="https://example.test")
        fetch = mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"files": ["a/b/1.jpg"] * 3}))

        page = await source.fetch_page(ACME, None, 1)
        source.invalidate()
        await source.fetch_page(ACME, page.cursor, 1)

        assert fetch.await_count == 2

    @pytest.mark.asyncio
    async def test_missing_files_key_is_parse_error(self, mocker):
        source = ProfileListSource(base_url="https://example.test")
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"items": []}))

        with pytest.raises(ParseError):
            await source.fetch_page(ACME, None, 10)

    @pytest.mark.asyncio
    async def test_non_string_entries_are_skipped(self, mocker):
        source = ProfileListSource(base_url="https://example.test")
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"files": ["a/b/1.jpg", 7, None, ""]}))

        page = await source.fetch_page(ACME, None, 10)

        assert [i.url for i in page.items] == ["a/b/1.jpg"]

    @pytest.mark.asyncio
    async def test_rejects_foreign_query_and_bad_cursor(self):
        source = ProfileListSource(base_url="https://example.test")
        with pytest.raises(ValueError):
            await source.fetch_page(DAY, None, 10)
        with pytest.raises(ValueError):
            await source.fetch_page(ACME, "abc", 10)
        with pytest.raises(ValueError):
            await source.fetch_page(ACME, None, 0)


class TestCursorApiSource:
    @pytest.mark.asyncio
    async def test_date_request_and_parse(self, mocker):
        source = CursorApiSource(base_url="https://api.example.test")
        fetch = mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={
            "items": [
                {"id": 1, "url": "https://cdn/x.jpg", "type": "photo",
                 "timestamp": "2024-03-05T10:15:30Z", "profileName": "acme"},
                {"url": "stories/bob/clip.mp4"},
            ],
            "nextCursor": "tok-2",
        }))

        page = await source.fetch_page(DAY, None, 30)

        fetch.assert_awaited_once_with(
            "https://api.example.test/api/media",
            params={"date": "05.03.24", "cursor": "", "limit": 30},
        )
        first, second = page.items
        assert (first.id, first.kind, first.owner_label) == ("1", "photo", "acme")
        assert (second.id, second.kind, second.timestamp_or_filename) == ("stories/bob/clip.mp4", "video", "")
        assert page.cursor == "tok-2"

    @pytest.mark.asyncio
    async def test_profile_request_uses_instagram_id(self, mocker):
        source = CursorApiSource(base_url="https://api.example.test")
        fetch = mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"items": [], "nextCursor": None}))

        page = await source.fetch_page(ACME, "tok-1", 20)

        fetch.assert_awaited_once_with(
            "https://api.example.test/api/profile-media",
            params={"instagramId": "acme", "cursor": "tok-1", "limit": 20},
        )
        assert page.items == ()
        assert page.is_last

    @pytest.mark.asyncio
    @pytest.mark.parametrize("next_cursor", ["", None])
    async def test_blank_cursor_means_last_page(self, mocker, next_cursor):
        source = CursorApiSource()
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"items": [], "nextCursor": next_cursor}))

        page = await source.fetch_page(DAY, None, 10)

        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_repeated_cursor_ends_the_feed(self, mocker):
        source = CursorApiSource()
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value={"items": [], "nextCursor": "same"}))

        page = await source.fetch_page(DAY, "same", 10)

        assert page.cursor is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        [],
        {"nextCursor": None},
        {"items": [], "nextCursor": 5},
        {"items": [{"id": 1}], "nextCursor": None},
        {"items": ["not-an-object"], "nextCursor": None},
    ])
    async def test_malformed_payloads(self, mocker, payload):
        source = CursorApiSource()
        mocker.patch.object(source, "_fetch_json", AsyncMock(return_value=payload))

        with pytest.raises(ParseError):
            await source.fetch_page(DAY, None, 10)

    @pytest.mark.asyncio
    async def test_numeric_cursor_is_rejected(self):
        with pytest.raises(ValueError):
            await CursorApiSource().fetch_page(DAY, 30, 10)


class TestFetchJson:
    @pytest.mark.asyncio
    async def test_success_passes_params(self):
        session = FakeSession(FakeResponse(payload={"files": []}))
        source = ProfileListSource(FakeHttpClient(session), base_url="https://example.test")

        data = await source._fetch_json("https://example.test/acme.json", params={"a": 1})

        assert data == {"files": []}
        assert session.requests == [("https://example.test/acme.json", {"a": 1})]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        session = FakeSession(FakeResponse(status=503, text="unavailable"))
        source = ProfileListSource(FakeHttpClient(session), base_url="https://example.test")

        with pytest.raises(FetchError) as exc_info:
            await source._fetch_json("https://example.test/acme.json")

        assert not isinstance(exc_info.value, ParseError)
        assert "503" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        bad = json.JSONDecodeError("Expecting value", "<html>", 0)
        session = FakeSession(FakeResponse(payload=bad))
        source = ProfileListSource(FakeHttpClient(session), base_url="https://example.test")

        with pytest.raises(ParseError):
            await source._fetch_json("https://example.test/acme.json")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()])
    async def test_transport_errors(self, error):
        source = ProfileListSource(FakeHttpClient(FakeSession(error)), base_url="https://example.test")

        with pytest.raises(FetchError):
            await source._fetch_json("https://example.test/acme.json")
