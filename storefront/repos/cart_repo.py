# storefront/repos/cart_repo.py
import hashlib
import json
import re
from pathlib import Path
from typing import Dict, List, Protocol

import redis
from pydantic import ValidationError

from storefront.domain.schemas import CartLine
from storefront.utils.retry import redis_retry
from storefront.utils.settings import (
    CART_STORAGE_BACKEND,
    CART_STORAGE_KEY,
    CART_STORAGE_PATH,
    REDIS_URL,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

SAFE_FILE_NAME = re.compile(r"[A-Za-z0-9_-]{1,128}")


class CartDecodeError(ValueError):
    pass


class CartBackend(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, data: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    """Backend w pamieci procesu (testy, dev)."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, data: str) -> None:
        self._data[key] = data

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileBackend:
    """Jeden plik JSON na klucz w katalogu `root`."""

    def __init__(self, root: str | Path = CART_STORAGE_PATH):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        name = key.replace(":", "_")
        if not SAFE_FILE_NAME.fullmatch(name):
            # klucz z nietypowymi znakami (np. '/' lub '..') -> hash zamiast nazwy
            name = hashlib.sha256(key.encode("utf-8")).hexdigest()
        path = self.root / f"{name}.json"
        if path.resolve().parent != self.root.resolve():
            raise ValueError(f"Klucz koszyka poza katalogiem {self.root}: {key!r}")
        return path

    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, data: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        #zapis przez plik tymczasowy, zeby nie zostawic polowy JSONa
        tmp = path.with_suffix(".tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class RedisBackend:
    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def read(self, key: str) -> str | None:
        return self.redis.get(key)

    @redis_retry()
    def write(self, key: str, data: str) -> None:
        #bez TTL, koszyk zyje dopoki go nie wyczyscimy
        self.redis.set(key, data)

    @redis_retry()
    def delete(self, key: str) -> None:
        self.redis.delete(key)


def build_backend(kind: str | None = None) -> CartBackend:
    kind = (kind or CART_STORAGE_BACKEND).lower()
    if kind == "memory":
        return MemoryBackend()
    if kind == "file":
        return FileBackend()
    if kind == "redis":
        return RedisBackend()
    raise ValueError(f"Nieznany backend koszyka: {kind}")


def encode_lines(lines: List[CartLine]) -> str:
    return json.dumps(
        {
            "version": SCHEMA_VERSION,
            "lines": [
                {
                    "product_id": line.product_id,
                    "name": line.name,
                    "image": line.image,
                    #string zeby Decimal wrocil bez strat
                    "unit_price": str(line.unit_price),
                    "quantity": line.quantity,
                }
                for line in lines
            ],
        }
    )


def _migrate_v0(items: list) -> list:
    # stary format: goła lista {id, name, price, quantity, image}
    return [
        {
            "product_id": str(item["id"]),
            "name": item.get("name", ""),
            "image": item.get("image"),
            "unit_price": item["price"],
            "quantity": item["quantity"],
        }
        for item in items
    ]


def decode_lines(raw: str) -> List[CartLine]:
    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise CartDecodeError(f"Niepoprawny JSON koszyka: {e}") from e

    try:
        if isinstance(payload, list):
            rows = _migrate_v0(payload)
        elif isinstance(payload, dict) and payload.get("version") == SCHEMA_VERSION:
            rows = payload["lines"]
        else:
            version = payload.get("version") if isinstance(payload, dict) else None
            raise CartDecodeError(f"Nieobslugiwana wersja koszyka: {version}")

        return [CartLine.model_validate(row) for row in rows]
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise CartDecodeError(f"Niepoprawna struktura koszyka: {e}") from e


class CartRepo:
    """
    Trwaly zapis koszyka pod stalym kluczem.
    load() nigdy nie rzuca, uszkodzone dane = pusty koszyk.
    """

    def __init__(self, backend: CartBackend, key: str = CART_STORAGE_KEY):
        self.backend = backend
        self.key = key

    def load(self) -> List[CartLine]:
        try:
            raw = self.backend.read(self.key)
        except (OSError, redis.RedisError) as e:
            logger.warning(f"Nie udalo sie odczytac koszyka {self.key}: {e}")
            return []

        if raw is None:
            return []

        try:
            lines = decode_lines(raw)
        except CartDecodeError as e:
            logger.warning(f"Koszyk {self.key} uszkodzony, reset do pustego: {e}")
            return []

        logger.info(f"Wczytano koszyk {self.key}: {len(lines)} pozycji")
        return lines

    def save(self, lines: List[CartLine]) -> bool:
        try:
            if lines:
                self.backend.write(self.key, encode_lines(lines))
            else:
                self.backend.delete(self.key)
        except (OSError, redis.RedisError) as e:
            # stan w pamieci zostaje, kolejna mutacja sprobuje ponownie
            logger.error(f"Nie udalo sie zapisac koszyka {self.key}: {e}")
            return False
        return True
