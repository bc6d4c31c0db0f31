"""Settings from the environment (optionally loaded from .env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from relate.application import DEFAULT_URL_SCHEME

DEFAULT_APP_GROUP = "group.com.NightGard.Relate-CRM"
STORE_NEO4J = "neo4j"
STORE_MEMORY = "memory"


def load_env_file() -> None:
    """Load .env from repo root or current dir (first found wins)."""
    for path in (
        Path(__file__).resolve().parent.parent.parent / ".env",
        Path.cwd() / ".env",
    ):
        if path.exists():
            load_dotenv(path)
            break


@dataclass(frozen=True)
class Settings:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    store: str = STORE_NEO4J
    shared_dir: Path = Path.home() / ".relate" / "shared"
    app_group: str = DEFAULT_APP_GROUP
    url_scheme: str = DEFAULT_URL_SCHEME
    contacts_file: Path = Path.home() / ".relate" / "contacts.json"


def _env(name: str, default: str) -> str:
    return (os.environ.get(name) or "").strip() or default


def load_settings() -> Settings:
    defaults = Settings()
    store = _env("RELATE_STORE", defaults.store).lower()
    if store not in (STORE_NEO4J, STORE_MEMORY):
        raise ValueError(f"RELATE_STORE must be {STORE_NEO4J!r} or {STORE_MEMORY!r}, got {store!r}")
    return Settings(
        neo4j_uri=_env("NEO4J_URI", defaults.neo4j_uri),
        neo4j_user=_env("NEO4J_USER", defaults.neo4j_user),
        neo4j_password=_env("NEO4J_PASSWORD", defaults.neo4j_password),
        store=store,
        shared_dir=Path(_env("RELATE_SHARED_DIR", str(defaults.shared_dir))).expanduser(),
        app_group=_env("RELATE_APP_GROUP", defaults.app_group),
        url_scheme=_env("RELATE_URL_SCHEME", defaults.url_scheme),
        contacts_file=Path(_env("RELATE_CONTACTS_FILE", str(defaults.contacts_file))).expanduser(),
    )
