"""Channel resolution for the dynamic ``channel`` setting.

Maps the channel id chosen on a notification rule to a ChannelOption
offered by a channel source (normally the delivery adapter itself).
"""

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

import structlog
from pydantic import ValidationError

from infrastructure.notifications.errors import ChannelNotFoundError, ChannelSourceError
from infrastructure.notifications.models import ChannelOption
from infrastructure.notifications.schema import is_blank

logger = structlog.get_logger()

NO_CHANNEL_SELECTED = "No channel selected for notification delivery."


class ChannelSource(Protocol):
    """Anything able to enumerate the destinations currently available."""

    def list_channels(
        self, settings: Mapping[str, Any]
    ) -> Sequence[Union[ChannelOption, Mapping[str, Any]]]: ...


class StaticChannelSource:
    """Channel source backed by a fixed list of options.

    Example:
        source = StaticChannelSource([
            {"id": 1, "name": "Tech Support", "description": "Channel ID"},
            {"id": 2, "name": "Customer Service", "description": "Channel ID"},
        ])
    """

    def __init__(self, options: Iterable[Union[ChannelOption, Mapping[str, Any]]]):
        self._options = tuple(_to_option(option) for option in options)

    def list_channels(self, settings: Mapping[str, Any]) -> List[ChannelOption]:
        return list(self._options)


@dataclass
class _CacheEntry:
    options: tuple
    expires_at: float


def _to_option(item: Union[ChannelOption, Mapping[str, Any]]) -> ChannelOption:
    if isinstance(item, ChannelOption):
        return item
    return ChannelOption.model_validate(dict(item))


def _fingerprint(settings: Mapping[str, Any]) -> str:
    # Hash so credentials are never kept as plain cache keys
    encoded = json.dumps(dict(settings), sort_keys=True, default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class ChannelResolver:
    """Resolve channel selections against a channel source.

    Optionally caches channel lists per settings fingerprint. The cache
    belongs to this resolver instance and entries expire after
    ``ttl_seconds``; a TTL of 0 disables caching.

    Args:
        source: ChannelSource used to enumerate destinations
        ttl_seconds: Cache TTL in seconds (0 = always fetch fresh)
        clock: Monotonic time source (seconds)
    """

    def __init__(
        self,
        source: ChannelSource,
        ttl_seconds: float = 0.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._cache: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def list_channels(self, settings: Optional[Mapping[str, Any]]) -> List[ChannelOption]:
        """List the destinations currently available.

        Returns an empty list when the source offers none.

        Raises:
            ChannelSourceError: If the source fails or returns malformed options
        """
        frozen_settings = MappingProxyType(dict(settings or {}))
        key = _fingerprint(frozen_settings) if self.ttl_seconds else None

        if key is not None:
            with self._lock:
                entry = self._cache.get(key)
                if entry is not None and self._clock() < entry.expires_at:
                    return list(entry.options)

        try:
            raw_options = self.source.list_channels(frozen_settings) or []
            options = tuple(_to_option(item) for item in raw_options)
        except ChannelSourceError:
            raise
        except ValidationError as e:
            logger.error("channel_source_malformed_option", error=str(e))
            raise ChannelSourceError(
                "Channel source returned a malformed channel option"
            ) from e
        except Exception as e:
            logger.error("channel_source_failed", error=str(e), exc_info=True)
            raise ChannelSourceError(f"Unable to list channels: {str(e)}") from e

        if key is not None:
            with self._lock:
                self._cache[key] = _CacheEntry(
                    options=options, expires_at=self._clock() + self.ttl_seconds
                )

        logger.debug("channels_listed", channel_count=len(options))
        return list(options)

    def resolve(
        self, field_value: Any, settings: Optional[Mapping[str, Any]]
    ) -> ChannelOption:
        """Find the ChannelOption matching the selected channel id.

        Raises:
            ChannelNotFoundError: If no channel is selected or the id is not offered
            ChannelSourceError: If the source cannot be queried
        """
        if is_blank(field_value):
            raise ChannelNotFoundError(NO_CHANNEL_SELECTED)

        wanted = str(field_value).strip()
        for option in self.list_channels(settings):
            if option.id == wanted:
                return option

        logger.warning("channel_not_found", channel=wanted)
        raise ChannelNotFoundError(
            f"Channel '{wanted}' is not available for notification delivery.",
            channel=wanted,
        )

    def invalidate(self) -> None:
        """Drop every cached channel list."""
        with self._lock:
            self._cache.clear()
