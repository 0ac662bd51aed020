"""Client for the zones known to the carbon intensity provider."""

from __future__ import annotations

import logging
import os
import threading

import requests

from greenjobs.registry.models import WorkerRegistryError, Zone

logger = logging.getLogger(__name__)

_DEFAULT_INTERVAL = 60
_DEFAULT_ZONES = (
    Zone("DE", "Germany"),
    Zone("EN", "England"),
    Zone("FR", "France"),
)


def refresh_interval() -> int:
    """Seconds between attempts to load zones, from CARBON_INTENSITY_PROVIDER_INTERVAL."""
    raw = os.environ.get("CARBON_INTENSITY_PROVIDER_INTERVAL", "")
    if not raw:
        return _DEFAULT_INTERVAL
    try:
        return int(raw)
    except ValueError as exc:
        logger.warning("Invalid sleep interval, using default 60s: %s", exc)
        return _DEFAULT_INTERVAL


class ZoneClient:
    """Knows the valid zones; starts with a built-in list and replaces it once loaded."""

    def __init__(self, base_url: str = "", background: bool = True) -> None:
        self.base_url = base_url
        self._zones: list[Zone] = list(_DEFAULT_ZONES)
        self._stop = threading.Event()
        if background:
            threading.Thread(
                target=self.load_zones,
                args=(refresh_interval(), self._stop),
                daemon=True,
                name="zone-loader",
            ).start()

    def get_zones(self) -> list[Zone]:
        """Fetch the zone list from the provider."""
        url = f"{self.base_url}/carbon-intensity/zones"
        try:
            response = requests.get(url, headers={"Content-Type": "application/json"})
        except requests.RequestException as exc:
            raise WorkerRegistryError(f"failed to create request: {exc}") from exc
        if response.status_code != 200:
            raise WorkerRegistryError(
                f"worker-registry error: {response.status_code} {response.reason}"
            )
        try:
            data = response.json()
            if data is None:
                return []
            if not isinstance(data, dict):
                raise ValueError("zone response must be a JSON object")
            return [Zone.from_dict(item) for item in data.get("zones") or []]
        except ValueError as exc:
            raise WorkerRegistryError(f"invalid zone response: {exc}") from exc

    def is_valid_zone(self, code: str) -> bool:
        return any(zone.code == code for zone in self._zones)

    def load_zones(
        self, interval: float | None = None, stop_event: threading.Event | None = None
    ) -> bool:
        """Retry fetching zones until it works or ``stop_event`` is set.

        Returns True once the zones were replaced, False if stopped first.
        """
        if interval is None:
            interval = refresh_interval()
        stop = stop_event if stop_event is not None else threading.Event()
        while not stop.is_set():
            try:
                zones = self.get_zones()
            except WorkerRegistryError as exc:
                logger.warning("Fetching zones failed... %s", exc)
                if stop.wait(interval):
                    break
                continue
            self._zones = zones
            logger.info("Zones successfully loaded: %s", zones)
            return True
        return False