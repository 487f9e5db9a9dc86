"""Proveedores de identidad y textura (clientes concretos).

Por qué un paquete:
- Agrupa módulos por familia (Minecraft, Roblox, Steam...).
- Cada clase implementa `IdentityProvider`, `TextureProvider` o ambos
  (ver `core.interfaces.provider`).
"""

from adapters.providers.chess import ChessComPlayerAvatar
from adapters.providers.github import GitHubProfilePng, GitHubUsersApiAvatar
from adapters.providers.minecraft import (
	AshconIdentity,
	CrafatarSkinMirror,
	MinecraftUuidLiteral,
	MojangBatchIdentity,
	MojangSessionTexture,
	PlayerDBIdentity,
)
from adapters.providers.overwatch import OwApiProfileIcon
from adapters.providers.roblox import (
	RobloxHeadshotTexture,
	RobloxUserSearchIdentity,
	RobloxUsernamesIdentity,
)
from adapters.providers.steam import SteamCommunityAvatar

__all__ = [
	"AshconIdentity",
	"ChessComPlayerAvatar",
	"CrafatarSkinMirror",
	"GitHubProfilePng",
	"GitHubUsersApiAvatar",
	"MinecraftUuidLiteral",
	"MojangBatchIdentity",
	"MojangSessionTexture",
	"OwApiProfileIcon",
	"PlayerDBIdentity",
	"RobloxHeadshotTexture",
	"RobloxUserSearchIdentity",
	"RobloxUsernamesIdentity",
	"SteamCommunityAvatar",
]
