"""Provider adapters against canned upstream responses (httpx.MockTransport)."""

import base64
import json

import httpx
import pytest

from adapters.http_client import HttpTextureFetcher, extract_og_image, request_json
from adapters.providers import (
    AshconIdentity,
    ChessComPlayerAvatar,
    GitHubUsersApiAvatar,
    MinecraftUuidLiteral,
    MojangBatchIdentity,
    MojangSessionTexture,
    OwApiProfileIcon,
    PlayerDBIdentity,
    RobloxHeadshotTexture,
    RobloxUserSearchIdentity,
    RobloxUsernamesIdentity,
    SteamCommunityAvatar,
)
from adapters.providers.steam import full_resolution, profile_url
from core.domain.identifiers import parse_identifier
from core.domain.models import TextureRef
from core.domain.results import NotFound, Restricted, Success, Unavailable
from core.interfaces.provider import TextureQuery


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _textures_property(skin_url: str | None) -> dict:
    textures = {"SKIN": {"url": skin_url}} if skin_url else {}
    payload = json.dumps({"profileName": "Alice", "textures": textures}).encode()
    return {"id": "abc123", "name": "Alice", "properties": [{"name": "textures", "value": base64.b64encode(payload).decode()}]}


class TestHttpHelpers:
    @pytest.mark.asyncio
    async def test_status_classification(self):
        statuses = {"/missing": 404, "/limited": 429, "/broken": 503, "/empty": 204}

        def handler(request):
            return httpx.Response(statuses[request.url.path])

        async with _client(handler) as client:
            missing = await request_json(client, "GET", "https://x/missing", provider="p")
            limited = await request_json(client, "GET", "https://x/limited", provider="p")
            broken = await request_json(client, "GET", "https://x/broken", provider="p")
            empty = await request_json(client, "GET", "https://x/empty", provider="p")

        assert missing == NotFound(provider="p")
        assert limited == Unavailable(reason="rate limited (HTTP 429)", provider="p")
        assert broken == Unavailable(reason="HTTP 503", provider="p")
        assert empty == NotFound(provider="p")

    @pytest.mark.asyncio
    async def test_malformed_json_is_unavailable(self):
        async with _client(lambda request: httpx.Response(200, text="<html>oops</html>")) as client:
            result = await request_json(client, "GET", "https://x/", provider="p")

        assert result == Unavailable(reason="malformed JSON", provider="p")

    @pytest.mark.asyncio
    async def test_network_timeout_is_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            result = await request_json(client, "GET", "https://x/", provider="p")

        assert result == Unavailable(reason="timeout", provider="p")

    def test_og_image_is_made_absolute(self):
        html = (
            "<html><head><title>Profile</title>"
            '<meta property="og:url" content="https://example.test/p">'
            '<meta property="og:image" content="/img/a_medium.jpg">'
            "</head></html>"
        )

        assert extract_og_image(html=html, base_url="https://example.test/id/x") == "https://example.test/img/a_medium.jpg"

    @pytest.mark.parametrize("html", ["", "<html><title>Error</title></html>", '<meta property="og:image" content="  ">'])
    def test_og_image_missing(self, html):
        assert extract_og_image(html=html, base_url="https://example.test/") is None

    @pytest.mark.asyncio
    async def test_fetcher_rejects_empty_body(self):
        async with _client(lambda request: httpx.Response(200, content=b"")) as client:
            result = await HttpTextureFetcher(client)(TextureRef(url="https://x/skin.png", source="mirror"))

        assert isinstance(result, Unavailable)
        assert result.provider == "mirror"


class TestMinecraft:
    @pytest.mark.asyncio
    async def test_uuid_literal(self):
        provider = MinecraftUuidLiteral()

        hit = await provider.resolve_identity(parse_identifier("069a79f4-44e9-4726-a5be-fca90e38aaf5"))
        miss = await provider.resolve_identity(parse_identifier("Notch"))

        assert hit.value.canonical_id == "069a79f444e94726a5befca90e38aaf5"
        assert isinstance(miss, NotFound)

    @pytest.mark.asyncio
    async def test_playerdb_found_with_skin_hint(self):
        def handler(request):
            assert request.url.path == "/api/player/minecraft/Alice"
            return httpx.Response(
                200,
                json={
                    "code": "player.found",
                    "data": {
                        "player": {
                            "username": "Alice",
                            "raw_id": "ABC-123",
                            "skin_texture": "https://textures.minecraft.net/texture/aa",
                        }
                    },
                },
            )

        async with _client(handler) as client:
            result = await PlayerDBIdentity(client).resolve_identity(parse_identifier("Alice"))

        assert result.value.canonical_id == "abc123"
        assert result.value.texture_hint.url == "https://textures.minecraft.net/texture/aa"

    @pytest.mark.asyncio
    async def test_playerdb_unknown_player(self):
        def handler(request):
            return httpx.Response(400, json={"code": "minecraft.api_failure", "success": False})

        async with _client(handler) as client:
            result = await PlayerDBIdentity(client).resolve_identity(parse_identifier("ghost_user"))

        assert isinstance(result, NotFound)

    @pytest.mark.asyncio
    async def test_ashcon(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"uuid": "069a79f4-44e9-4726-a5be-fca90e38aaf5", "username": "Notch", "textures": {"skin": {"url": "https://t/skin"}}},
            )

        async with _client(handler) as client:
            result = await AshconIdentity(client).resolve_identity(parse_identifier("Notch"))

        assert result.value.canonical_id == "069a79f444e94726a5befca90e38aaf5"
        assert result.value.texture_hint.source == "ashcon"

    @pytest.mark.asyncio
    async def test_mojang_batch_posts_the_name_and_matches_exactly(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"id": "ABC123", "name": "alice"}])

        async with _client(handler) as client:
            result = await MojangBatchIdentity(client).resolve_identity(parse_identifier("Alice"))

        assert seen == {"method": "POST", "body": ["Alice"]}
        assert result.value.canonical_id == "abc123"

    @pytest.mark.asyncio
    async def test_mojang_batch_empty_list_is_not_found(self):
        async with _client(lambda request: httpx.Response(200, json=[])) as client:
            result = await MojangBatchIdentity(client).resolve_identity(parse_identifier("ghost_user"))

        assert isinstance(result, NotFound)

    @pytest.mark.asyncio
    async def test_session_texture_decodes_the_skin_url(self):
        def handler(request):
            assert request.url.path.endswith("/abc123")
            assert request.url.params["unsigned"] == "false"
            return httpx.Response(200, json=_textures_property("https://textures.minecraft.net/texture/fresh"))

        async with _client(handler) as client:
            result = await MojangSessionTexture(client).locate_texture(TextureQuery(parse_identifier("Alice"), "abc123"))

        assert result.value.url == "https://textures.minecraft.net/texture/fresh"

    @pytest.mark.asyncio
    async def test_session_texture_without_skin_is_not_found(self):
        async with _client(lambda request: httpx.Response(200, json=_textures_property(None))) as client:
            result = await MojangSessionTexture(client).locate_texture(TextureQuery(parse_identifier("Alice"), "abc123"))

        assert isinstance(result, NotFound)

    @pytest.mark.asyncio
    async def test_session_texture_rate_limited(self):
        async with _client(lambda request: httpx.Response(429)) as client:
            result = await MojangSessionTexture(client).locate_texture(TextureQuery(parse_identifier("Alice"), "abc123"))

        assert isinstance(result, Unavailable)
        assert "429" in result.reason


class TestRoblox:
    @pytest.mark.asyncio
    async def test_usernames_lookup(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": [{"id": 156, "name": "builderman"}]})

        async with _client(handler) as client:
            result = await RobloxUsernamesIdentity(client).resolve_identity(parse_identifier("builderman"))

        assert seen["body"] == {"usernames": ["builderman"], "excludeBannedUsers": True}
        assert result.value.canonical_id == "156"

    @pytest.mark.asyncio
    async def test_search_prefers_exact_match(self):
        def handler(request):
            assert request.url.params["keyword"] == "Builderman"
            return httpx.Response(
                200,
                json={"data": [{"id": 1, "name": "builderman_fan"}, {"id": 156, "name": "builderman"}]},
            )

        async with _client(handler) as client:
            result = await RobloxUserSearchIdentity(client).resolve_identity(parse_identifier("Builderman"))

        assert result.value.canonical_id == "156"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "entry,expected",
        [
            ({"state": "Completed", "imageUrl": "https://tr.rbxcdn.com/x/420/420/png"}, Success),
            ({"state": "Blocked", "imageUrl": ""}, Restricted),
            ({"state": "Pending", "imageUrl": None}, Unavailable),
        ],
    )
    async def test_headshot_states(self, entry, expected):
        async with _client(lambda request: httpx.Response(200, json={"data": [{"targetId": 156, **entry}]})) as client:
            result = await RobloxHeadshotTexture(client).locate_texture(TextureQuery(parse_identifier("builderman"), "156"))

        assert isinstance(result, expected)

    @pytest.mark.asyncio
    async def test_headshot_size_follows_output_size(self):
        sizes = []

        def handler(request):
            sizes.append(request.url.params["size"])
            return httpx.Response(200, json={"data": [{"state": "Completed", "imageUrl": "https://x"}]})

        async with _client(handler) as client:
            provider = RobloxHeadshotTexture(client)
            await provider.locate_texture(TextureQuery(parse_identifier("a"), "1", size=256))
            await provider.locate_texture(TextureQuery(parse_identifier("a"), "1", size=600))

        assert sizes == ["420x420", "720x720"]


class TestSteam:
    def test_profile_url(self):
        assert profile_url("76561197960287930") == "https://steamcommunity.com/profiles/76561197960287930"
        assert profile_url("gabelogannewell") == "https://steamcommunity.com/id/gabelogannewell"

    @pytest.mark.parametrize(
        "url",
        [
            "https://avatars.steamstatic.com/abc_medium.jpg",
            "https://avatars.steamstatic.com/abc_thumb.jpg",
            "https://avatars.steamstatic.com/abc.jpg",
            "https://avatars.steamstatic.com/abc_full.jpg",
        ],
    )
    def test_full_resolution(self, url):
        assert full_resolution(url) == "https://avatars.steamstatic.com/abc_full.jpg"

    @pytest.mark.asyncio
    async def test_og_image_is_upgraded_to_full(self):
        html = '<html><head><meta property="og:image" content="https://avatars.steamstatic.com/abc_medium.jpg"></head></html>'

        def handler(request):
            assert request.url.path == "/id/gabe"
            return httpx.Response(200, text=html)

        async with _client(handler) as client:
            result = await SteamCommunityAvatar(client).locate_texture(TextureQuery(parse_identifier("gabe")))

        assert result.value.url == "https://avatars.steamstatic.com/abc_full.jpg"

    @pytest.mark.asyncio
    async def test_error_page_without_og_image_is_not_found(self):
        html = "<html><head><title>Steam Community :: Error</title></head></html>"

        async with _client(lambda request: httpx.Response(200, text=html)) as client:
            result = await SteamCommunityAvatar(client).locate_texture(TextureQuery(parse_identifier("nobody")))

        assert isinstance(result, NotFound)


class TestDirectLookups:
    @pytest.mark.asyncio
    async def test_github_avatar_url_gets_size_param(self):
        def handler(request):
            assert request.headers["Accept"] == "application/vnd.github+json"
            return httpx.Response(200, json={"avatar_url": "https://avatars.githubusercontent.com/u/1?v=4"})

        async with _client(handler) as client:
            result = await GitHubUsersApiAvatar(client).locate_texture(
                TextureQuery(parse_identifier("octocat"), size=1000)
            )

        assert result.value.url == "https://avatars.githubusercontent.com/u/1?v=4&s=460"

    @pytest.mark.asyncio
    async def test_chess_lowercases_and_handles_missing_avatar(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"username": "hikaru"})

        async with _client(handler) as client:
            result = await ChessComPlayerAvatar(client).locate_texture(TextureQuery(parse_identifier("Hikaru")))

        assert paths == ["/pub/player/hikaru"]
        assert isinstance(result, NotFound)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["Cats#11481", "Cats-11481"])
    async def test_overwatch_battletag_in_path(self, raw):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"name": "Cats#11481", "icon": "https://d15f34w2p8l1cc.cloudfront.net/x.png"})

        async with _client(handler) as client:
            result = await OwApiProfileIcon(client).locate_texture(TextureQuery(parse_identifier(raw)))

        assert paths == ["/v1/stats/pc/us/Cats-11481/profile"]
        assert isinstance(result, Success)

    @pytest.mark.asyncio
    async def test_overwatch_private_without_icon_is_restricted(self):
        async with _client(lambda request: httpx.Response(200, json={"private": True})) as client:
            result = await OwApiProfileIcon(client).locate_texture(TextureQuery(parse_identifier("Cats#1")))

        assert isinstance(result, Restricted)

    @pytest.mark.asyncio
    async def test_overwatch_player_not_found(self):
        async with _client(lambda request: httpx.Response(200, json={"error": "Player not found"})) as client:
            result = await OwApiProfileIcon(client).locate_texture(TextureQuery(parse_identifier("Nobody#1")))

        assert isinstance(result, NotFound)
