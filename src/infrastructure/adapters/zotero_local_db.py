"""Adapter reading items and annotations from the local Zotero SQLite database."""

from __future__ import annotations

import logging
import os
import platform
import re
import sqlite3
from configparser import ConfigParser
from pathlib import Path
from typing import Any

from ...application.ports.zotero_library import ZoteroLibraryPort
from ...domain.errors import (
    ZoteroDatabaseLockedError,
    ZoteroDatabaseNotFoundError,
    ZoteroLibraryReadError,
    ZoteroProfileNotFoundError,
)
from ...domain.models.library_item import AnnotationChange, Creator, LibraryItem

logger = logging.getLogger(__name__)

# itemAnnotations.type values
ANNOTATION_TYPES = {
    1: "highlight",
    2: "note",
    3: "image",
    4: "ink",
    5: "underline",
    6: "text",
}

# itemAttachments.linkMode values
LINK_MODES = {
    0: "imported_file",
    1: "imported_url",
    2: "linked_file",
    3: "linked_url",
    4: "embedded_image",
}

_MULTIPART_DATE = re.compile(r"^\d{4}-\d{2}-\d{2} ")

_ITEM_QUERY = """
    SELECT
        i.itemID,
        i.key,
        it.typeName AS item_type,
        l.type AS library_type,
        COALESCE(att.parentItemID, note.parentItemID, ann.parentItemID) AS parent_id,
        att.contentType AS content_type,
        att.linkMode AS link_mode
    FROM items i
    JOIN itemTypes it ON i.itemTypeID = it.itemTypeID
    LEFT JOIN libraries l ON i.libraryID = l.libraryID
    LEFT JOIN itemAttachments att ON att.itemID = i.itemID
    LEFT JOIN itemNotes note ON note.itemID = i.itemID
    LEFT JOIN itemAnnotations ann ON ann.itemID = i.itemID
"""


def unpack_multipart_date(value: str | None) -> str | None:
    """
    Return the user-entered part of a Zotero SQL date.

    Zotero stores item dates as 'YYYY-MM-DD <as entered>' (e.g. '2020-03-00 March 2020').
    Values without that prefix are returned unchanged.
    """
    if not value:
        return value
    if _MULTIPART_DATE.match(value):
        return value[11:]
    return value


def normalize_timestamp(value: str) -> str:
    """Convert an ISO 8601 timestamp to Zotero's 'YYYY-MM-DD HH:MM:SS' form."""
    normalized = value.strip().replace("T", " ")
    if normalized.endswith("Z"):
        normalized = normalized[:-1]
    return normalized[:19]


class LocalZoteroDbAdapter(ZoteroLibraryPort):
    """
    Read-only access to a Zotero library through its zotero.sqlite file.

    The database is opened in immutable read-only URI mode so Zotero can keep
    running while it is read. No network access is involved.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        """
        Initialize local Zotero database adapter.

        Args:
            db_path: Optional path to zotero.sqlite. If None, the default profile is auto-detected.

        Raises:
            ZoteroProfileNotFoundError: If no profile can be detected
            ZoteroDatabaseNotFoundError: If the database file does not exist
            ZoteroDatabaseLockedError: If the database is locked
        """
        self._conn: sqlite3.Connection | None = None

        if db_path is None:
            profile_dir = self._detect_zotero_profile()
            if profile_dir is None:
                raise ZoteroProfileNotFoundError(
                    "Zotero profile directory",
                    hint=(
                        "Ensure Zotero is installed and has been run at least once, "
                        "or set db_path explicitly:\n"
                        "   [zotero]\n"
                        '   db_path = "/path/to/Zotero/zotero.sqlite"'
                    ),
                )
            db_path = profile_dir / "zotero.sqlite"

        self._db_path = Path(db_path)
        if not self._db_path.exists():
            raise ZoteroDatabaseNotFoundError(
                str(self._db_path),
                hint="Check the db_path setting in zotero-capacities.toml.",
            )

        self._open_db_readonly()

    @staticmethod
    def _detect_zotero_profile() -> Path | None:
        """
        Detect the default Zotero profile directory per platform.

        Platform paths:
        - Windows: %APPDATA%, %LOCALAPPDATA%, then %USERPROFILE%\\Documents (each + Zotero\\Profiles)
        - macOS: ~/Library/Application Support/Zotero/Profiles/
        - Linux: ~/.zotero/zotero/Profiles/
        """
        system = platform.system()

        if system == "Windows":
            bases = [
                os.environ.get("APPDATA", ""),
                os.environ.get("LOCALAPPDATA", ""),
                os.path.join(os.environ.get("USERPROFILE", ""), "Documents"),
            ]
            candidates = [Path(base) / "Zotero" for base in bases if base]
        elif system == "Darwin":
            candidates = [Path.home() / "Library" / "Application Support" / "Zotero"]
        else:
            candidates = [Path.home() / ".zotero" / "zotero"]

        for base in candidates:
            profiles_ini = base / "Profiles" / "profiles.ini"
            if not profiles_ini.exists():
                continue
            profile_path = LocalZoteroDbAdapter._parse_profiles_ini(profiles_ini, base)
            if profile_path is not None:
                return profile_path
        return None

    @staticmethod
    def _parse_profiles_ini(profiles_ini: Path, base_dir: Path) -> Path | None:
        """
        Find the default profile in profiles.ini (first profile when none is marked default).
        """
        config = ConfigParser()
        config.read(profiles_ini)

        profile_sections = [s for s in config.sections() if s.startswith("Profile")]
        for section in profile_sections:
            try:
                if config.getboolean(section, "Default", fallback=False):
                    profile_id = config.get(section, "Path", fallback=None)
                    if profile_id:
                        return base_dir / "Profiles" / profile_id
            except ValueError:
                continue

        for section in profile_sections:
            profile_id = config.get(section, "Path", fallback=None)
            if profile_id:
                return base_dir / "Profiles" / profile_id
        return None

    def _open_db_readonly(self) -> None:
        """
        Open the database with `immutable=1&mode=ro` (no writes, no locking).

        Raises:
            ZoteroDatabaseLockedError: If database is locked
            ZoteroDatabaseNotFoundError: If the file cannot be opened
        """
        abs_path = self._db_path.resolve()
        uri = f"file:{abs_path}?immutable=1&mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
        except sqlite3.OperationalError as e:
            if "locked" in str(e).lower():
                raise ZoteroDatabaseLockedError(
                    str(self._db_path),
                    hint="Database is locked by another process. Wait a moment and try again.",
                ) from e
            raise ZoteroDatabaseNotFoundError(
                str(self._db_path),
                hint=f"Failed to open database: {e}",
            ) from e

        self._conn.row_factory = sqlite3.Row
        logger.info("Opened Zotero database in read-only mode", extra={"db_path": str(abs_path)})

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ZoteroDatabaseNotFoundError(str(self._db_path), hint="Database connection is closed")
        return self._conn

    def _query(self, operation: str, sql: str, params: tuple[Any, ...], key: str | None = None) -> list[sqlite3.Row]:
        try:
            return self._connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise ZoteroLibraryReadError(operation, str(e), key=key) from e

    def get_item(self, item_key: str) -> LibraryItem | None:
        rows = self._query("item", _ITEM_QUERY + " WHERE i.key = ?", (item_key,), key=item_key)
        if not rows:
            return None
        return self._build_item(rows[0])

    def get_attachments(self, item_key: str) -> list[LibraryItem]:
        sql = _ITEM_QUERY + """
            JOIN items parent ON att.parentItemID = parent.itemID
            WHERE parent.key = ?
            ORDER BY i.itemID
        """
        rows = self._query("attachments", sql, (item_key,), key=item_key)
        return [self._build_item(row) for row in rows]

    def get_annotations(self, attachment_key: str) -> list[dict[str, Any]]:
        sql = """
            SELECT
                i.itemID,
                i.key,
                i.dateAdded,
                i.dateModified,
                ann.type,
                ann.text,
                ann.comment,
                ann.color,
                ann.pageLabel,
                ann.sortIndex,
                ann.position
            FROM itemAnnotations ann
            JOIN items i ON ann.itemID = i.itemID
            JOIN items parent ON ann.parentItemID = parent.itemID
            WHERE parent.key = ?
            ORDER BY ann.sortIndex
        """
        rows = self._query("annotations", sql, (attachment_key,), key=attachment_key)

        records: list[dict[str, Any]] = []
        for row in rows:
            annotation_type = ANNOTATION_TYPES.get(row["type"], f"unknown:{row['type']}")
            records.append({
                "key": row["key"],
                "annotationType": annotation_type,
                "annotationText": row["text"],
                "annotationComment": row["comment"],
                "annotationColor": row["color"],
                "annotationPageLabel": row["pageLabel"],
                "annotationSortIndex": row["sortIndex"],
                "annotationPosition": row["position"],
                "dateAdded": row["dateAdded"],
                "dateModified": row["dateModified"],
                "tags": [{"tag": name} for name in self._tags(row["itemID"], row["key"])],
            })

        logger.debug(
            f"Read {len(records)} annotations for attachment {attachment_key}",
            extra={"attachment_key": attachment_key, "count": len(records)},
        )
        return records

    def list_annotation_changes(self, since: str) -> list[AnnotationChange]:
        """
        List annotations modified at or after `since`.

        The connection is reopened first: an immutable connection does not see
        writes Zotero made after it was opened.
        """
        self.close()
        self._open_db_readonly()

        sql = """
            SELECT i.key, parent.key AS attachment_key, i.dateModified
            FROM itemAnnotations ann
            JOIN items i ON ann.itemID = i.itemID
            LEFT JOIN items parent ON ann.parentItemID = parent.itemID
            WHERE i.dateModified >= ?
            ORDER BY i.dateModified, i.itemID
        """
        rows = self._query("annotation changes", sql, (normalize_timestamp(since),))
        return [
            AnnotationChange(
                annotation_key=row["key"],
                attachment_key=row["attachment_key"],
                date_modified=row["dateModified"],
            )
            for row in rows
        ]

    def _build_item(self, row: sqlite3.Row) -> LibraryItem:
        item_id = row["itemID"]
        key = row["key"]
        fields = self._fields(item_id, key)

        parent_key = None
        if row["parent_id"] is not None:
            parent_rows = self._query("parent", "SELECT key FROM items WHERE itemID = ?", (row["parent_id"],), key=key)
            if parent_rows:
                parent_key = parent_rows[0]["key"]

        link_mode = row["link_mode"]
        return LibraryItem(
            key=key,
            item_type=row["item_type"],
            title=fields.get("title", ""),
            parent_key=parent_key,
            library_type=row["library_type"] or "user",
            url=fields.get("url"),
            doi=fields.get("DOI"),
            date=unpack_multipart_date(fields.get("date")),
            creators=self._creators(item_id, key),
            content_type=row["content_type"],
            link_mode=LINK_MODES.get(link_mode) if link_mode is not None else None,
        )

    def _fields(self, item_id: int, key: str) -> dict[str, str]:
        sql = """
            SELECT f.fieldName, v.value
            FROM itemData d
            JOIN fields f ON d.fieldID = f.fieldID
            JOIN itemDataValues v ON d.valueID = v.valueID
            WHERE d.itemID = ?
        """
        rows = self._query("item fields", sql, (item_id,), key=key)
        return {row["fieldName"]: str(row["value"]) for row in rows if row["value"] is not None}

    def _creators(self, item_id: int, key: str) -> tuple[Creator, ...]:
        sql = """
            SELECT c.firstName, c.lastName
            FROM itemCreators ic
            JOIN creators c ON ic.creatorID = c.creatorID
            WHERE ic.itemID = ?
            ORDER BY ic.orderIndex
        """
        rows = self._query("creators", sql, (item_id,), key=key)
        return tuple(
            Creator(first_name=row["firstName"] or "", last_name=row["lastName"] or "")
            for row in rows
            if row["firstName"] or row["lastName"]
        )

    def _tags(self, item_id: int, key: str) -> list[str]:
        sql = """
            SELECT t.name
            FROM itemTags it
            JOIN tags t ON it.tagID = t.tagID
            WHERE it.itemID = ?
            ORDER BY t.name
        """
        return [row["name"] for row in self._query("tags", sql, (item_id,), key=key)]

    def close(self) -> None:
        """Explicitly close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> LocalZoteroDbAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
