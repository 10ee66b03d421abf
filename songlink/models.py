"""Pydantic models for the Songlink proxy pipeline."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator


class EntityType(StrEnum):
    SONG = "song"
    ALBUM = "album"


class LookupMode(StrEnum):
    URL = "url"
    PLATFORM = "platform"


class RequestProfile(BaseModel):
    """A correlated set of browser header values used on the outbound leg."""

    model_config = ConfigDict(frozen=True)

    user_agent: str
    accept: str
    accept_language: str
    accept_encoding: str
    connection: str
    dnt: str

    def to_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
            "Accept-Encoding": self.accept_encoding,
            "Connection": self.connection,
            "DNT": self.dnt,
        }


class LookupQuery(BaseModel):
    """A validated Songlink lookup, either by source URL or by platform entity.

    Exactly one shape holds: ``url`` alone, or the full
    ``platform``/``type``/``id`` triple.
    """

    model_config = ConfigDict(frozen=True)

    url: str | None = None
    platform: str | None = None
    type: EntityType | None = None
    id: str | None = None
    user_country: str = "US"
    song_if_single: bool = False
    key: str | None = None

    @model_validator(mode="after")
    def check_single_mode(self) -> "LookupQuery":
        triple = (self.platform, self.type, self.id)
        has_triple = all(triple)
        if self.url:
            if any(triple):
                raise ValueError("url cannot be combined with platform, type or id")
        elif not has_triple:
            raise ValueError("Either url or (platform, type, id) must be provided")
        return self

    @property
    def mode(self) -> LookupMode:
        return LookupMode.URL if self.url else LookupMode.PLATFORM

    def to_params(self) -> dict[str, str]:
        """Serialize to Songlink query parameters for this query's mode only."""
        if self.mode is LookupMode.URL:
            params = {"url": self.url}
        else:
            params = {"platform": self.platform, "type": str(self.type), "id": self.id}

        params["userCountry"] = self.user_country
        params["songIfSingle"] = "true" if self.song_if_single else "false"
        if self.key:
            params["key"] = self.key
        return params


class UpstreamResponse(BaseModel):
    """A Songlink API response with its body already decompressed."""

    status_code: int
    body: bytes
    content_encoding: str | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class ErrorEnvelope(BaseModel):
    """Uniform JSON body returned on every failure path."""

    error: str
    status: int
