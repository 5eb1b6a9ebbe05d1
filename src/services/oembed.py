"""oEmbed client used to fill in bookmark metadata from the link's provider."""
import logging
import re
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError, field_validator

from schemas.bookmark import BookmarkCreate

PROVIDERS_URL = 'https://oembed.com/providers.json'


class OEmbedError(Exception):
    """Raised when the oEmbed provider cannot be reached or returns an error."""

    pass


class OEmbedNotFoundError(OEmbedError):
    """Raised when no provider knows the URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"No oEmbed information found for URL: {url}")


class OEmbedEndpoint(BaseModel):
    """A provider endpoint and the URL schemes it serves."""

    url: str
    schemes: list[str] = []


class OEmbedProvider(BaseModel):
    """An entry of the oembed.com provider registry."""

    provider_name: str
    provider_url: str = ""
    endpoints: list[OEmbedEndpoint] = []


class OEmbedLink(BaseModel):
    """
    The subset of an oEmbed response used by bookmarks.

    `duration` is not part of the oEmbed standard but is returned by video
    providers such as Vimeo. Some providers (e.g. Flickr) send width and height
    as strings; they are coerced to integers.
    """

    type: str = ""
    provider_name: str = ""
    title: str = ""
    author_name: str = ""
    width: int = 0
    height: int = 0
    duration: int = 0

    @field_validator("width", "height", "duration", mode="before")
    @classmethod
    def empty_as_zero(cls, v: Any) -> Any:
        """Providers may send null or an empty string for unknown sizes."""
        if v is None or v == "":
            return 0
        return v

    @field_validator("title", "author_name", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """Treat a null string property as missing."""
        return "" if v is None else v


_providers_adapter = TypeAdapter(list[OEmbedProvider])


def scheme_to_pattern(scheme: str) -> re.Pattern[str]:
    """Compile a registry URL scheme (with `*` wildcards) to a regex."""
    parts = (re.escape(part) for part in scheme.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)


class OEmbedFetcher:
    """Fetches oEmbed properties of a link from its provider."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        providers: list[OEmbedProvider],
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._endpoints: list[tuple[re.Pattern[str], str]] = [
            (scheme_to_pattern(scheme), endpoint.url.replace("{format}", "json"))
            for provider in providers
            for endpoint in provider.endpoints
            for scheme in endpoint.schemes
        ]

    @classmethod
    async def from_registry(
        cls,
        client: httpx.AsyncClient,
        providers_url: str = PROVIDERS_URL,
        logger: logging.Logger | None = None,
    ) -> "OEmbedFetcher":
        """
        Build a fetcher from the provider registry at `providers_url`.

        Raises:
            OEmbedError: If the registry cannot be downloaded or parsed.
        """
        try:
            response = await client.get(providers_url)
            response.raise_for_status()
            providers = _providers_adapter.validate_python(response.json())
        except (httpx.HTTPError, ValueError) as e:
            raise OEmbedError(f"Failed to load oEmbed providers from {providers_url}") from e
        return cls(client, providers, logger=logger)

    def find_endpoint(self, url: str) -> str | None:
        """Return the endpoint URL of the first provider whose schemes match `url`."""
        for pattern, endpoint_url in self._endpoints:
            if pattern.match(url):
                return endpoint_url
        return None

    async def fetch(self, url: str) -> OEmbedLink:
        """
        Fetch the oEmbed properties of `url`.

        Raises:
            OEmbedNotFoundError: If no provider serves the URL or the provider returns 404.
            OEmbedError: For any other failure.
        """
        endpoint_url = self.find_endpoint(url)
        if endpoint_url is None:
            raise OEmbedNotFoundError(url)

        self._logger.info("Fetching oEmbed properties of %s from %s", url, endpoint_url)
        try:
            response = await self._client.get(
                endpoint_url, params={"format": "json", "url": url},
            )
        except httpx.HTTPError as e:
            raise OEmbedError(f"Failed to reach oEmbed provider for {url}: {e}") from e

        if response.status_code == 404:
            raise OEmbedNotFoundError(url)
        if response.status_code >= 300:
            raise OEmbedError(f"oEmbed provider returned a {response.status_code} status code")

        self._logger.debug("oEmbed provider response: %s", response.text)
        try:
            return OEmbedLink.model_validate(response.json())
        except (ValidationError, ValueError) as e:
            raise OEmbedError(f"Invalid oEmbed response for {url}") from e


def apply_oembed(data: BookmarkCreate, link: OEmbedLink | None) -> BookmarkCreate:
    """
    Fill the bookmark properties that were not provided from an oEmbed link.

    Values given by the client always win over the provider's.
    """
    if link is None:
        return data

    updates: dict[str, Any] = {}
    if not data.title:
        updates["title"] = link.title
    if not data.author_name:
        updates["author_name"] = link.author_name
    if data.width == 0:
        updates["width"] = link.width
    if data.height == 0:
        updates["height"] = link.height
    if data.duration == 0:
        updates["duration"] = link.duration
    return data.model_copy(update=updates)
