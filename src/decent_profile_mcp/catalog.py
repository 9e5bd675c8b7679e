"""Read-only catalog of the bundled advanced presets.

Copyright (C) 2024 Decent Profile MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .analyzer import analyze
from .errors import ProfileError, UnknownPresetName
from .models import AnalyzedProfile, Preset
from .parser import parse_steps
from .profile import Profile, build_preset

logger = logging.getLogger(__name__)

PROFILES_DIR_ENV = "DECENT_PROFILES_DIR"
PROFILE_SUFFIX = ".tcl"


def default_profiles_dir() -> Path:
    """Get the directory holding the profile documents.

    Reads ``DECENT_PROFILES_DIR`` and falls back to the ``profiles``
    directory shipped with the package.
    """
    override = os.getenv(PROFILES_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).parent / "profiles"


def load_preset(name: str, text: str) -> Optional[Preset]:
    """Build a preset from one document.

    Args:
        name: Document name
        text: Document text

    Returns:
        Preset, or None when the document is not an advanced profile

    Raises:
        ProfileError: If the document is malformed or lacks a required value
    """
    profile = Profile.from_text(text)
    if not profile.is_advanced():
        profile_type = profile.profile_type()
        logger.debug(f"Skipping {name}: profile type {profile_type.value if profile_type else None}")
        return None
    return build_preset(name, profile)


class PresetCatalog:
    """Presets sorted by title, immutable once built."""

    def __init__(self, presets: Iterable[Preset]):
        self._presets: Tuple[Preset, ...] = tuple(sorted(presets, key=lambda p: (p.title, p.name)))
        self._by_name: Dict[str, Preset] = {}
        for preset in self._presets:
            self._by_name.setdefault(preset.name, preset)

    @classmethod
    def from_documents(cls, documents: Iterable[Tuple[str, str]]) -> "PresetCatalog":
        """Build a catalog from ``(name, text)`` pairs.

        Malformed documents are skipped with a warning; documents that are
        not advanced profiles are left out.
        """
        presets = []
        for name, text in documents:
            try:
                preset = load_preset(name, text)
            except ProfileError as e:
                logger.warning(f"Skipping {name}: {e.message}")
                continue
            if preset is not None:
                presets.append(preset)
        return cls(presets)

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "PresetCatalog":
        """Build a catalog from every ``*.tcl`` file in a directory.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Profiles directory not found: {directory}")

        def documents() -> Iterator[Tuple[str, str]]:
            for path in sorted(directory.glob(f"*{PROFILE_SUFFIX}")):
                try:
                    text = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning(f"Skipping {path.name}: {e}")
                    continue
                yield path.name, text

        catalog = cls.from_documents(documents())
        logger.info(f"Loaded {len(catalog)} presets from {directory}")
        return catalog

    @property
    def presets(self) -> Tuple[Preset, ...]:
        return self._presets

    def list_presets(self) -> List[Preset]:
        return list(self._presets)

    def get(self, name: str) -> Preset:
        """Get a preset by name.

        Raises:
            UnknownPresetName: If no preset has this name
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownPresetName(name) from None

    def analyze(self, name: str) -> AnalyzedProfile:
        """Analyze a preset's step sequence.

        Raises:
            UnknownPresetName: If no preset has this name
            ProfileError: If the step sequence is malformed
        """
        return analyze(parse_steps(self.get(name).advanced_shot))

    def __len__(self) -> int:
        return len(self._presets)

    def __iter__(self) -> Iterator[Preset]:
        return iter(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name


_catalog: Optional[PresetCatalog] = None
_catalog_lock = threading.Lock()


def get_catalog() -> PresetCatalog:
    """Get the process-wide catalog, building it on first use.

    Concurrent first callers wait for a single build and share its result.
    """
    global _catalog
    catalog = _catalog
    if catalog is not None:
        return catalog
    with _catalog_lock:
        if _catalog is None:
            _catalog = PresetCatalog.from_directory(default_profiles_dir())
        return _catalog


def reset_catalog() -> None:
    """Drop the process-wide catalog so the next access rebuilds it."""
    global _catalog
    with _catalog_lock:
        _catalog = None
