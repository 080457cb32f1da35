# src/storage/layout.py - v2
"""Blob key conventions.

The prefixes below are the only schema the bucket has; any consumer reading
these trees depends on them being bit-exact:

    cache-package/<h0:2>/<h2:4>/<h4:>__<lang>/{orig|work}/<name>
    files/<datePath>/<idFile>/{orig|xliff}/<name>
    queue-projects/<safeSession>/<safeSubPath>
    fast-analysis/waiting_analysis_<projectId>.ser
    originalZip/cache/<hash>__originalZip/<name>
    originalZip/work/<YYYYMMDD>/<projectId>/<name>
"""

from __future__ import annotations

import re
from datetime import date, datetime

from filestorage.core.errors import InvalidHashError
from filestorage.core.models import CacheArea, ProjectArea

# Top-level folders
CACHE_PACKAGE_FOLDER = "cache-package"
FILES_FOLDER = "files"
QUEUE_FOLDER = "queue-projects"
ZIP_FOLDER = "originalZip"
FAST_ANALYSIS_FOLDER = "fast-analysis"

# Zip sub-folders
ZIP_CACHE_DIR = "cache"
ZIP_WORK_DIR = "work"

OBJECTS_SAFE_DELIMITER = "__"
ORIGINAL_ZIP_PLACEHOLDER = "__##originalZip##"
CANONICAL_WORK_EXTENSION = ".sdlxliff"

SEPARATOR = "/"


# --- Hash tree ---

def compose_cache_path(content_hash: str) -> tuple[str, str, str]:
    """Split a content hash into its three hash-tree levels.

    >>> compose_cache_path("6981e08bc467")
    ('69', '81', 'e08bc467')

    Raises:
        InvalidHashError: If the hash is not a string of at least 4 characters.
    """
    if not isinstance(content_hash, str) or len(content_hash) < 4:
        raise InvalidHashError(
            f"Content hash must have at least 4 characters: {content_hash!r}",
            details={"hash": content_hash},
        )
    return content_hash[0:2], content_hash[2:4], content_hash[4:]


def cache_package_prefix(content_hash: str, lang: str) -> str:
    first, second, third = compose_cache_path(content_hash)
    leaf = f"{third}{OBJECTS_SAFE_DELIMITER}{lang.lower()}"
    return SEPARATOR.join([CACHE_PACKAGE_FOLDER, first, second, leaf])


def cache_area_prefix(content_hash: str, lang: str, area: CacheArea) -> str:
    return f"{cache_package_prefix(content_hash, lang)}{SEPARATOR}{area.value}"


def cache_area_key(content_hash: str, lang: str, area: CacheArea, name: str) -> str:
    return f"{cache_area_prefix(content_hash, lang, area)}{SEPARATOR}{name}"


# --- Project files ---

def split_date_hash_path(date_hash_path: str) -> tuple[str, str]:
    """Split ``<datePath>/<hash>`` into its two parts."""
    parts = [p for p in date_hash_path.split(SEPARATOR) if p]
    if len(parts) < 2:
        raise ValueError(
            f"Expected '<datePath>/<hash>', got {date_hash_path!r}"
        )
    return parts[0], parts[1]


def project_file_dir(date_path: str, id_file: int | str) -> str:
    return SEPARATOR.join([FILES_FOLDER, date_path, str(id_file)])


def project_file_prefix(date_path: str, id_file: int | str, area: ProjectArea) -> str:
    return f"{project_file_dir(date_path, id_file)}{SEPARATOR}{area.value}"


def project_file_key(
    date_path: str, id_file: int | str, area: ProjectArea, name: str
) -> str:
    return f"{project_file_prefix(date_path, id_file, area)}{SEPARATOR}{name}"


# --- Upload queue ---

def upload_session_safe_name(upload_session: str) -> str:
    """Lower-case a session token and strip GUID braces.

    >>> upload_session_safe_name("{CAD1B6E1-B312-8713-E8C3-97145410FD37}")
    'cad1b6e1-b312-8713-e8c3-97145410fd37'
    """
    return upload_session.lower().replace("{", "").replace("}", "")


def safe_sub_path(relative_path: str) -> str:
    """Make a staged relative path safe for use in a blob key.

    ``|`` pairs a hash with a language upstream and is replaced by the
    ``__`` delimiter: ``AAD03B...|it-IT`` becomes ``aad03b...__it-it``.
    """
    normalized = relative_path.replace("\\", SEPARATOR).lower()
    return normalized.replace("|", OBJECTS_SAFE_DELIMITER)


def queue_prefix(upload_session: str) -> str:
    return f"{QUEUE_FOLDER}{SEPARATOR}{upload_session_safe_name(upload_session)}"


def queue_key(upload_session: str, relative_path: str) -> str:
    return f"{queue_prefix(upload_session)}{SEPARATOR}{safe_sub_path(relative_path)}"


# --- Fast analysis ---

def fast_analysis_key(project_id: int | str) -> str:
    return f"{FAST_ANALYSIS_FOLDER}{SEPARATOR}waiting_analysis_{project_id}.ser"


# --- Zip archives ---

def original_zip_placeholder() -> str:
    return ORIGINAL_ZIP_PLACEHOLDER.replace("#", "")


def zip_cache_prefix(zip_hash: str) -> str:
    return SEPARATOR.join(
        [ZIP_FOLDER, ZIP_CACHE_DIR, f"{zip_hash}{original_zip_placeholder()}"]
    )


def date_path(create_date: date | datetime | str) -> str:
    """Return the ``YYYYMMDD`` folder name for a project creation date."""
    if isinstance(create_date, str):
        create_date = datetime.fromisoformat(create_date.strip())
    return create_date.strftime("%Y%m%d")


def original_zip_dir(create_date: date | datetime | str, project_id: int | str) -> str:
    return SEPARATOR.join([ZIP_WORK_DIR, date_path(create_date), str(project_id)])


def original_zip_path(
    create_date: date | datetime | str, project_id: int | str, zip_name: str
) -> str:
    return f"{original_zip_dir(create_date, project_id)}{SEPARATOR}{zip_name}"


def zip_work_key(
    create_date: date | datetime | str, project_id: int | str, zip_name: str
) -> str:
    return f"{ZIP_FOLDER}{SEPARATOR}{original_zip_path(create_date, project_id, zip_name)}"


# --- General ---

def last_part_of_key(key: str) -> str:
    """``c1/68/9bd7...__it-it/orig/hello.txt`` -> ``hello.txt``."""
    return key.rsplit(SEPARATOR, 1)[-1]


def basename_fix(path: str) -> str:
    """Unicode-safe basename accepting both ``/`` and ``\\`` separators."""
    return re.split(r"[\\/]", str(path).rstrip("\\/"))[-1]


def has_extension(key: str) -> bool:
    return "." in last_part_of_key(key)
