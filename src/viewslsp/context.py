"""
Project context resolution.

Given the path of a changed ``.view`` file, locate the enclosing project (the
nearest ``package.json``), enumerate every view and custom font reachable from
it and index them so the parser can resolve cross-file references.

The three enumerations are blocking directory walks; they are dispatched to an
executor and awaited together so the event loop stays free.
"""
from __future__ import annotations

import asyncio
import logging
import os
from concurrent.futures import Executor
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_NAME = 'package.json'
PROJECT_CONFIG_NAME = '.viewslsp.toml'

VIEW_SUFFIX = '.view'
VIEW_CUSTOM_SUFFIX = '.view.js'
FONTS_DIR_NAME = 'Fonts'
FONT_SUFFIXES = frozenset({'.eot', '.otf', '.ttf', '.woff', '.woff2'})

# Directory names never entered during discovery.
DEFAULT_IGNORE = frozenset({'node_modules'})


class ContextResolutionError(Exception):
    """Raised when the project files cannot be enumerated."""


@dataclass(frozen=True)
class FontFace:
    family: str
    weight: str
    style: str
    file: str


@dataclass
class ProjectContext:
    views_by_id: dict[str, set[str]] = field(default_factory=dict)
    custom_fonts: dict[str, set[FontFace]] = field(default_factory=dict)


def add_to_map_set(mapping: dict, key, value) -> None:
    """Add *value* to the set stored under *key*, creating it if needed."""
    mapping.setdefault(key, set()).add(value)


# ---------------------------------------------------------------------------
# Project root
# ---------------------------------------------------------------------------

def find_project_manifest(start: str | os.PathLike) -> Path | None:
    """Return the nearest ``package.json`` at or above *start*, or None."""
    path = Path(start)
    directory = path if path.is_dir() else path.parent
    for candidate in (directory, *directory.parents):
        manifest = candidate / MANIFEST_NAME
        if manifest.is_file():
            return manifest
    return None


def project_root(file_path: str | os.PathLike) -> Path:
    """Directory holding the project manifest for *file_path*.

    Falls back to the directory of *file_path* itself when no manifest exists.
    """
    manifest = find_project_manifest(file_path) or Path(file_path)
    return manifest.parent


def read_project_ignore(root: str | os.PathLike) -> frozenset[str]:
    """Directory names to skip, including those listed in ``.viewslsp.toml``."""
    config_path = Path(root) / PROJECT_CONFIG_NAME
    if not config_path.is_file():
        return DEFAULT_IGNORE
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib

    try:
        with open(config_path, 'rb') as f:
            data = tomllib.load(f)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        logger.warning('read_project_ignore: could not read %s', config_path, exc_info=True)
        return DEFAULT_IGNORE
    extra = data.get('ignore', [])
    if not isinstance(extra, list):
        logger.warning('read_project_ignore: "ignore" in %s is not a list', config_path)
        return DEFAULT_IGNORE
    return DEFAULT_IGNORE | {str(name) for name in extra}


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def _walk(root: str | os.PathLike, ignore: frozenset[str]):
    """Yield ``(directory, filename)`` pairs below *root*, pruning ignored dirs."""

    def _raise(err: OSError):
        raise err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = sorted(
            d for d in dirnames if d not in ignore and not d.startswith('.')
        )
        for name in sorted(filenames):
            yield dirpath, name


def get_files_view(root, ignore: frozenset[str] = DEFAULT_IGNORE) -> list[str]:
    return [
        os.path.join(d, name) for d, name in _walk(root, ignore)
        if name.endswith(VIEW_SUFFIX)
    ]


def get_files_view_custom(root, ignore: frozenset[str] = DEFAULT_IGNORE) -> list[str]:
    return [
        os.path.join(d, name) for d, name in _walk(root, ignore)
        if name.endswith(VIEW_CUSTOM_SUFFIX)
    ]


def get_files_font_custom(root, ignore: frozenset[str] = DEFAULT_IGNORE) -> list[str]:
    return [
        os.path.join(d, name) for d, name in _walk(root, ignore)
        if os.path.basename(d) == FONTS_DIR_NAME
        and os.path.splitext(name)[1].lower() in FONT_SUFFIXES
    ]


def get_view_id_from_file(file: str) -> str:
    """``src/Main/Header.view.js`` -> ``Header``."""
    name = os.path.basename(file)
    for suffix in (VIEW_CUSTOM_SUFFIX, VIEW_SUFFIX):
        if name.endswith(suffix):
            return name[:-len(suffix)]
    return name


def font_face_from_file(file: str) -> FontFace:
    """Decode ``Family-Weight[-italic].ext`` into a :class:`FontFace`.

    A missing weight defaults to ``400`` and a missing style to ``normal``.
    """
    stem = Path(file).stem
    family, _, rest = stem.partition('-')
    weight, _, style = rest.partition('-')
    return FontFace(
        family=family,
        weight=weight or '400',
        style=style.lower() or 'normal',
        file=file,
    )


def process_custom_fonts(custom_fonts: dict[str, set[FontFace]], files_font_custom) -> None:
    for file in files_font_custom:
        face = font_face_from_file(file)
        add_to_map_set(custom_fonts, face.family, face)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

async def resolve_context(file_path: str | os.PathLike, executor: Executor | None = None) -> ProjectContext:
    """Build the :class:`ProjectContext` for the project enclosing *file_path*.

    Raises :class:`ContextResolutionError` if any enumeration fails; a partial
    context is never returned.
    """
    loop = asyncio.get_running_loop()
    try:
        src = await loop.run_in_executor(executor, project_root, file_path)
        ignore = await loop.run_in_executor(executor, read_project_ignore, src)
        logger.debug('resolve_context: %s -> project root %s', file_path, src)

        files_view, files_view_custom, files_font_custom = await asyncio.gather(
            loop.run_in_executor(executor, get_files_view, src, ignore),
            loop.run_in_executor(executor, get_files_view_custom, src, ignore),
            loop.run_in_executor(executor, get_files_font_custom, src, ignore),
        )
    except OSError as e:
        raise ContextResolutionError(f'cannot enumerate project files for {file_path}: {e}') from e

    context = ProjectContext()
    for file in files_view:
        add_to_map_set(context.views_by_id, get_view_id_from_file(file), file)
    for file in files_view_custom:
        add_to_map_set(context.views_by_id, get_view_id_from_file(file), file)
    process_custom_fonts(context.custom_fonts, files_font_custom)

    logger.debug('resolve_context: %d views, %d font families',
                 len(context.views_by_id), len(context.custom_fonts))
    return context
