"""
Unit Tests for the /search Handler

Covers result shaping and filtering, and the two ways of queueing what was
found: a single pick or the whole batch.
"""

import pytest

from moosek.application.commands.search import SearchHandler, SearchResults, search_results_payload
from moosek.application.interfaces.audio_engine import LoadResult
from moosek.domain.music.value_objects import LoadType, PlaybackState, SearchKind, SearchSource
from moosek.domain.shared.exceptions import CollaboratorFailureError, UserInputError
from moosek.domain.shared.messages import DiscordUIMessages, ErrorMessages

from conftest import GUILD_ID, make_entry


@pytest.fixture
def search(harness):
    return SearchHandler(audio_engine=harness.engine, play=harness.play)


@pytest.fixture
def hits():
    return LoadResult(load_type=LoadType.SEARCH, tracks=[make_entry(f"Hit {i}") for i in range(1, 6)])


@pytest.fixture
def album():
    return LoadResult(
        load_type=LoadType.PLAYLIST,
        tracks=[make_entry("Side A", duration_ms=60_000), make_entry("Side B", duration_ms=120_000)],
        playlist_name="Album",
    )


def _args(**overrides):
    return {"query": "lofi", "platform": None, "type": "all", "limit": 10, **overrides}


def _results(actor, **overrides):
    values = {
        "query": "lofi",
        "source": SearchSource.YOUTUBE,
        "kind": SearchKind.ALL,
        "requester_id": actor.user_id,
        "tracks": [make_entry("One"), make_entry("Two"), make_entry("Three")],
    }
    values.update(overrides)
    return SearchResults(**values)


class TestSearch:
    @pytest.mark.asyncio
    async def test_returns_candidates_without_joining(self, harness, search, actors, make_context, hits):
        harness.engine.result = hits

        outcome = await search.search(make_context(actors["member"], "search"), _args(limit=3, platform="scsearch"))

        results = outcome.data
        assert outcome.is_success
        assert [entry.title for entry in results.tracks] == ["Hit 1", "Hit 2", "Hit 3"]
        assert results.source is SearchSource.SOUNDCLOUD
        assert results.requester_id == actors["member"].user_id
        assert not results.is_playlist
        harness.engine.search.assert_awaited_once_with("lofi", SearchSource.SOUNDCLOUD, 3)
        assert harness.registry.get(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_playlist_keeps_every_track(self, harness, search, actors, make_context, album):
        harness.engine.result = album

        outcome = await search.search(make_context(actors["member"]), _args(limit=1))

        assert outcome.data.is_playlist
        assert len(outcome.data.tracks) == 2
        assert outcome.data.batch_name == "Album"

    @pytest.mark.asyncio
    async def test_load_error(self, harness, search, actors, make_context):
        harness.engine.result = LoadResult.failed("boom")
        with pytest.raises(CollaboratorFailureError):
            await search.search(make_context(actors["member"]), _args())

    @pytest.mark.asyncio
    async def test_no_results(self, harness, search, actors, make_context):
        with pytest.raises(UserInputError) as excinfo:
            await search.search(make_context(actors["member"]), _args())
        assert excinfo.value.message == ErrorMessages.NO_RESULTS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind,fixture", [("playlists", "hits"), ("tracks", "album")])
    async def test_kind_mismatch(self, request, harness, search, actors, make_context, kind, fixture):
        harness.engine.result = request.getfixturevalue(fixture)

        with pytest.raises(UserInputError) as excinfo:
            await search.search(make_context(actors["member"]), _args(type=kind))

        assert excinfo.value.field == "type"
        assert excinfo.value.message == ErrorMessages.SEARCH_KIND_MISMATCH.format(kind=kind)

    @pytest.mark.asyncio
    async def test_requires_voice(self, harness, search, actors, make_context, hits):
        harness.engine.result = hits
        actor = actors["member"].model_copy(update={"voice_channel_id": None})
        with pytest.raises(UserInputError):
            await search.search(make_context(actor), _args())
        harness.engine.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_platform(self, search, actors, make_context):
        with pytest.raises(UserInputError):
            await search.search(make_context(actors["member"]), _args(platform="spotify"))


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_pick_one_starts_playback(self, harness, search, actors, make_context):
        member = actors["member"]

        outcome = await search.enqueue_one(make_context(member), _results(member), 1)

        session = harness.registry.require(GUILD_ID)
        assert outcome.message == DiscordUIMessages.TRACK_ADDED
        assert session.state is PlaybackState.PLAYING
        assert session.current.title == "Two"
        assert session.current.requester_id == member.user_id
        assert len(session.queue) == 0

    @pytest.mark.asyncio
    async def test_pick_out_of_range(self, harness, search, actors, make_context):
        member = actors["member"]
        with pytest.raises(UserInputError) as excinfo:
            await search.enqueue_one(make_context(member), _results(member), 3)
        assert excinfo.value.message == ErrorMessages.SEARCH_SELECTION_INVALID
        assert harness.registry.get(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_queue_everything_as_batch(self, harness, search, actors, make_context):
        member = actors["member"]

        outcome = await search.enqueue_all(make_context(member), _results(member))

        session = harness.registry.require(GUILD_ID)
        assert outcome.payload.title == DiscordUIMessages.EMBED_PLAYLIST_ADDED
        assert 'search results for "lofi"' in outcome.payload.description
        assert session.current.title == "One"
        assert [entry.title for entry in session.queue] == ["Two", "Three"]

    @pytest.mark.asyncio
    async def test_shuffle_keeps_every_entry(self, harness, search, actors, make_context):
        member = actors["member"]

        await search.enqueue_all(make_context(member), _results(member), shuffle=True)

        session = harness.registry.require(GUILD_ID)
        titles = [session.current.title, *(entry.title for entry in session.queue)]
        assert sorted(titles) == ["One", "Three", "Two"]

    @pytest.mark.asyncio
    async def test_joins_into_existing_session(self, harness, playing_session, search, actors, make_context):
        member = actors["member"]

        await search.enqueue_one(make_context(member), _results(member), 0)

        assert playing_session.current.title == "Track 1"
        assert playing_session.queue[-1].title == "One"


class TestPayload:
    def test_track_list(self, actors):
        payload = search_results_payload(_results(actors["member"]))

        fields = {field.name: field.value for field in payload.fields}
        assert payload.title == DiscordUIMessages.EMBED_SEARCH_RESULTS
        assert payload.footer == DiscordUIMessages.SEARCH_FOOTER
        assert "**Source:** ytsearch" in fields[DiscordUIMessages.FIELD_SEARCH_FILTERS]
        assert fields[DiscordUIMessages.FIELD_RESULTS].startswith("**1.** [One]")

    def test_playlist(self, actors):
        results = _results(
            actors["member"],
            tracks=[make_entry("A", duration_ms=60_000), make_entry("B", duration_ms=120_000)],
            playlist_name="Album",
        )

        payload = search_results_payload(results)

        fields = {field.name: field.value for field in payload.fields}
        assert payload.title == DiscordUIMessages.EMBED_PLAYLIST_FOUND
        assert payload.description == "**Album**"
        assert fields[DiscordUIMessages.FIELD_TRACKS] == "2"
        assert fields[DiscordUIMessages.FIELD_DURATION] == "3:00"
