"""Avatar endpoint catalogue.

Each endpoint is data, not a copy of the request handler: which identity
chain to run (or none, for assets located directly by name), which texture
chain, in which freshness order, and how to compose the result. Provider
instances are built per request around that request's HTTP client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import httpx

from adapters.providers import (
    AshconIdentity,
    ChessComPlayerAvatar,
    CrafatarSkinMirror,
    GitHubProfilePng,
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
from core.domain.models import CompositionSpec, Resampling
from core.interfaces.provider import IdentityProvider, TextureProvider
from core.services.image_compositor import full_image_spec, minecraft_face_spec

IdentityChainFactory = Callable[[httpx.AsyncClient], list[IdentityProvider]]
TextureChainFactory = Callable[[httpx.AsyncClient], list[TextureProvider]]
CompositionFactory = Callable[[int | None, Resampling], CompositionSpec]


@dataclass(frozen=True)
class AssetDefinition:
    family: str
    kind: str
    label: str
    textures: TextureChainFactory
    composition: CompositionFactory
    identity: IdentityChainFactory | None = None
    query_params: tuple[str, ...] = ("user",)
    usage: str = field(default="?user=<name>")

    @property
    def route(self) -> str:
        return f"{self.family}/{self.kind}"

    @property
    def skips_identity(self) -> bool:
        return self.identity is None


MINECRAFT_FACE = AssetDefinition(
    family="minecraft",
    kind="face",
    label="Minecraft player",
    identity=lambda client: [
        MinecraftUuidLiteral(),
        PlayerDBIdentity(client),
        AshconIdentity(client),
        MojangBatchIdentity(client),
    ],
    textures=lambda client: [
        MojangSessionTexture(client),
        CrafatarSkinMirror(),
    ],
    composition=minecraft_face_spec,
    query_params=("user", "username"),
)

ROBLOX_AVATAR = AssetDefinition(
    family="roblox",
    kind="avatar",
    label="Roblox user",
    identity=lambda client: [
        RobloxUsernamesIdentity(client),
        RobloxUserSearchIdentity(client),
    ],
    textures=lambda client: [RobloxHeadshotTexture(client)],
    composition=full_image_spec,
)

STEAM_AVATAR = AssetDefinition(
    family="steam",
    kind="avatar",
    label="Steam profile",
    textures=lambda client: [SteamCommunityAvatar(client)],
    composition=full_image_spec,
    usage="?user=<vanity name or SteamID64>",
)

GITHUB_AVATAR = AssetDefinition(
    family="github",
    kind="avatar",
    label="GitHub user",
    textures=lambda client: [GitHubUsersApiAvatar(client), GitHubProfilePng()],
    composition=full_image_spec,
)

CHESS_AVATAR = AssetDefinition(
    family="chess",
    kind="avatar",
    label="Chess.com player",
    textures=lambda client: [ChessComPlayerAvatar(client)],
    composition=full_image_spec,
)

OVERWATCH_ICON = AssetDefinition(
    family="overwatch",
    kind="icon",
    label="Overwatch player",
    textures=lambda client: [OwApiProfileIcon(client)],
    composition=full_image_spec,
    usage="?user=<Name-1234 or Name#1234>",
)

CATALOG: dict[str, AssetDefinition] = {
    asset.route: asset
    for asset in (
        MINECRAFT_FACE,
        ROBLOX_AVATAR,
        STEAM_AVATAR,
        GITHUB_AVATAR,
        CHESS_AVATAR,
        OVERWATCH_ICON,
    )
}


def get_asset(route: str) -> AssetDefinition | None:
    return CATALOG.get(route.strip("/").lower())
