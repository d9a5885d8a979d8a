import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CityRef:
    """A city the service reports on. Identity is the provider city id."""

    id: int
    name: Optional[str] = None


class CityDirectory:
    """Ordered, static list of cities loaded from a JSON file.

    The file holds an array of objects with an `id` (or `CityCode`) and an
    optional `name`. An unreadable or malformed file yields an empty
    directory rather than an error; `reload()` can be called later to retry.
    """

    def __init__(self, cities: Optional[List[CityRef]] = None, path: Optional[Path] = None):
        self.path = path
        self._cities: List[CityRef] = list(cities or [])

    @classmethod
    def from_file(cls, path: Path) -> "CityDirectory":
        directory = cls(path=Path(path))
        directory.reload()
        return directory

    def reload(self) -> None:
        if self.path is None:
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._cities = [_parse_city(item) for item in raw]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.error("Failed to load cities from %s: %s", self.path, exc)
            self._cities = []
            return
        logger.info("Loaded %d cities from %s", len(self._cities), self.path)

    def __iter__(self) -> Iterator[CityRef]:
        return iter(self._cities)

    def __len__(self) -> int:
        return len(self._cities)


def _parse_city(item: dict) -> CityRef:
    city_id = item["id"] if "id" in item else item["CityCode"]
    return CityRef(id=int(city_id), name=item.get("name"))
