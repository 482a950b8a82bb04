"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives under ``.metadata/``:

* ``llm_profiles.yaml``  – LLM provider credentials (Gemini model + API key)
* ``ai.yaml``            – request limits, timeout and log level

On first run, missing files are copied from ``.metadata.example/``.

The acting user and the seed papers ship with the package in
``scholarai/data/library.yaml``.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from scholarai.models.paper import Author, Paper

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
API_KEY_ENV_VARS = ("GOOGLE_API_KEY", "API_KEY")
LIBRARY_PATH = Path(__file__).resolve().parent / "data" / "library.yaml"


# ---------------------------------------------------------------------------
# Config dataclasses
# ---------------------------------------------------------------------------

@dataclass
class LLMProfile:
    """A single LLM provider credential."""

    id: str
    name: str
    model: str
    api_key: str


@dataclass
class AILimits:
    """Cost/latency guards applied around every AI request.

    ``review_max_chars`` and ``chat_max_chars`` bound how much paper text is
    submitted; ``improve_max_chars`` is the editor's refusal threshold;
    ``request_timeout`` (seconds) bounds each backend call.
    """

    review_max_chars: int = 10_000
    chat_max_chars: int = 20_000
    improve_max_chars: int = 5_000
    request_timeout: float = 30.0


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings: a singleton with runtime-mutable fields.

    Usage::

        settings = Settings.load()          # first call → create
        settings = Settings.load()          # later → same object
        settings.update(log_level="DEBUG")  # runtime change
        settings = Settings.reload()        # re-read from disk
    """

    metadata_dir: Path = Path(".metadata")
    library_path: Path = LIBRARY_PATH
    log_level: str = "INFO"
    limits: AILimits = field(default_factory=AILimits)

    # LLM profiles
    llm_profiles: list[LLMProfile] = field(default_factory=list)
    active_llm_id: Optional[str] = None

    # ── Computed properties ────────────────────────────────────────────

    @property
    def active_llm(self) -> Optional[LLMProfile]:
        """Return the currently active LLM profile, or None."""
        if not self.active_llm_id:
            return None
        return next(
            (p for p in self.llm_profiles if p.id == self.active_llm_id),
            None,
        )

    @property
    def model(self) -> str:
        """Model name of the active profile, or the built-in default."""
        profile = self.active_llm
        return profile.model if profile else DEFAULT_MODEL

    @property
    def api_key(self) -> Optional[str]:
        """API key of the active profile, else from the environment."""
        profile = self.active_llm
        if profile:
            return profile.api_key
        for name in API_KEY_ENV_VARS:
            value = os.getenv(name)
            if value:
                return value
        return None

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(log_level="DEBUG")
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``scholarai/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        llm_profiles, active_llm_id = _load_llm_profiles(
            metadata_dir / "llm_profiles.yaml"
        )
        limits, log_level = _load_ai_config(metadata_dir / "ai.yaml")

        return cls(
            metadata_dir=metadata_dir,
            library_path=LIBRARY_PATH,
            log_level=log_level,
            limits=limits,
            llm_profiles=llm_profiles,
            active_llm_id=active_llm_id,
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        metadata_dir.mkdir(parents=True, exist_ok=True)

        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _read_yaml(path: Path) -> Optional[dict[str, Any]]:
    """Read a YAML mapping; None if missing, unreadable or not a mapping."""
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _load_llm_profiles(path: Path) -> tuple[list[LLMProfile], Optional[str]]:
    """Load LLM profiles from ``llm_profiles.yaml``.

    Returns:
        Tuple of (profiles list, active profile id)
    """
    data = _read_yaml(path)
    if data is None:
        return [], None

    active_id = data.get("active") or None
    profiles = []
    for p in data.get("profiles") or []:
        if isinstance(p, dict) and p.get("id") and p.get("model") and p.get("api_key"):
            profiles.append(
                LLMProfile(
                    id=str(p["id"]),
                    name=str(p.get("name", p["model"])),
                    model=str(p["model"]),
                    api_key=str(p["api_key"]),
                )
            )
    return profiles, active_id


def _load_ai_config(path: Path) -> tuple[AILimits, str]:
    """Load request limits and log level from ``ai.yaml``.

    Unknown keys are ignored; values that are not numbers keep the default.
    """
    limits = AILimits()
    data = _read_yaml(path)
    if data is None:
        return limits, "INFO"

    raw_limits = data.get("limits") or {}
    if isinstance(raw_limits, dict):
        for key in ("review_max_chars", "chat_max_chars", "improve_max_chars"):
            if key in raw_limits:
                try:
                    setattr(limits, key, int(raw_limits[key]))
                except (TypeError, ValueError):
                    logger.warning("Ignoring invalid %s=%r in %s", key, raw_limits[key], path)
        if "request_timeout" in raw_limits:
            try:
                limits.request_timeout = float(raw_limits["request_timeout"])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid request_timeout in %s", path)

    log_level = str(data.get("log_level") or "INFO").upper()
    return limits, log_level


def load_library(path: Path = LIBRARY_PATH) -> tuple[Author, list[Paper]]:
    """Load the acting user and seed papers from ``library.yaml``.

    This is **application data** (ships with the package), not user config.
    Papers may reference the acting user by the id ``current_user``.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    current_user = Author(**data["current_user"])
    papers: list[Paper] = []
    for entry in data.get("papers") or []:
        authors = [
            current_user if a == "current_user" else Author(**a)
            for a in entry.get("authors") or []
        ]
        papers.append(
            Paper(
                id=str(entry["id"]),
                title=entry["title"],
                abstract=entry.get("abstract", ""),
                content=entry.get("content", ""),
                authors=authors,
                status=entry.get("status", "Draft"),
                publish_date=entry.get("publish_date"),
                tags=list(entry.get("tags") or []),
                citations=int(entry.get("citations", 0)),
                cover_image=entry.get("cover_image"),
            )
        )
    return current_user, papers
