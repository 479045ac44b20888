"""Shared fixtures: a small zotero.sqlite with the tables the local adapter reads."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

SCHEMA = """
CREATE TABLE libraries (libraryID INTEGER PRIMARY KEY, type TEXT NOT NULL);
CREATE TABLE itemTypes (itemTypeID INTEGER PRIMARY KEY, typeName TEXT);
CREATE TABLE items (
    itemID INTEGER PRIMARY KEY,
    itemTypeID INT NOT NULL,
    libraryID INT NOT NULL,
    key TEXT NOT NULL,
    dateAdded TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    dateModified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE fields (fieldID INTEGER PRIMARY KEY, fieldName TEXT);
CREATE TABLE itemDataValues (valueID INTEGER PRIMARY KEY, value UNIQUE);
CREATE TABLE itemData (itemID INT, fieldID INT, valueID INT, PRIMARY KEY (itemID, fieldID));
CREATE TABLE creators (creatorID INTEGER PRIMARY KEY, firstName TEXT, lastName TEXT);
CREATE TABLE itemCreators (itemID INT, creatorID INT, orderIndex INT, PRIMARY KEY (itemID, orderIndex));
CREATE TABLE itemAttachments (itemID INTEGER PRIMARY KEY, parentItemID INT, linkMode INT, contentType TEXT);
CREATE TABLE itemNotes (itemID INTEGER PRIMARY KEY, parentItemID INT, note TEXT);
CREATE TABLE itemAnnotations (
    itemID INTEGER PRIMARY KEY,
    parentItemID INT NOT NULL,
    type INTEGER NOT NULL,
    text TEXT,
    comment TEXT,
    color TEXT,
    pageLabel TEXT,
    sortIndex TEXT NOT NULL,
    position TEXT NOT NULL
);
CREATE TABLE tags (tagID INTEGER PRIMARY KEY, name TEXT NOT NULL UNIQUE);
CREATE TABLE itemTags (itemID INT, tagID INT, type INT NOT NULL DEFAULT 0, PRIMARY KEY (itemID, tagID));
"""

ITEM_KEY = "ITEM0001"
PDF_KEY = "ATT00001"
HTML_KEY = "ATT00002"
NOTE_KEY = "NOTE0001"
HIGHLIGHT_KEY = "ANN00001"
UNDERLINE_KEY = "ANN00002"
INK_KEY = "ANN00003"


def _position(page_index: int) -> str:
    return json.dumps({"pageIndex": page_index, "rects": [[10.0, 20.0, 30.0, 40.0]]})


def build_zotero_db(path: Path) -> Path:
    """
    Create a library with one journal article that has:

    - a PDF attachment with a highlight (p.1, tagged), an underline (p.2) and an ink drawing
    - an HTML snapshot attachment
    - a child note
    """
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA)
    conn.executemany("INSERT INTO libraries VALUES (?, ?)", [(1, "user"), (2, "group")])
    conn.executemany(
        "INSERT INTO itemTypes VALUES (?, ?)",
        [(1, "journalArticle"), (2, "attachment"), (3, "annotation"), (4, "note")],
    )
    conn.executemany("INSERT INTO fields VALUES (?, ?)", [(1, "title"), (2, "url"), (3, "DOI"), (4, "date")])
    conn.executemany(
        "INSERT INTO items (itemID, itemTypeID, libraryID, key, dateAdded, dateModified) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (1, 1, 1, ITEM_KEY, "2024-01-01 00:00:00", "2024-01-01 00:00:00"),
            (2, 2, 1, PDF_KEY, "2024-01-01 00:00:01", "2024-01-01 00:00:01"),
            (3, 3, 1, HIGHLIGHT_KEY, "2024-05-01 10:00:00", "2024-05-01 10:00:00"),
            (4, 3, 1, UNDERLINE_KEY, "2024-05-02 10:00:00", "2024-05-02 10:00:00"),
            (5, 2, 1, HTML_KEY, "2024-01-01 00:00:02", "2024-01-01 00:00:02"),
            (6, 4, 1, NOTE_KEY, "2024-01-01 00:00:03", "2024-01-01 00:00:03"),
            (7, 3, 1, INK_KEY, "2024-04-01 09:00:00", "2024-04-01 09:00:00"),
        ],
    )
    conn.executemany(
        "INSERT INTO itemDataValues VALUES (?, ?)",
        [
            (1, "Attention Is All You Need"),
            (2, "https://arxiv.org/abs/1706.03762"),
            (3, "10.48550/arXiv.1706.03762"),
            (4, "2017-06-12 June 12, 2017"),
            (5, "Full Text PDF"),
            (6, "Snapshot"),
        ],
    )
    conn.executemany(
        "INSERT INTO itemData VALUES (?, ?, ?)",
        [(1, 1, 1), (1, 2, 2), (1, 3, 3), (1, 4, 4), (2, 1, 5), (5, 1, 6)],
    )
    conn.executemany(
        "INSERT INTO creators VALUES (?, ?, ?)",
        [(1, "Ashish", "Vaswani"), (2, "Noam", "Shazeer")],
    )
    conn.executemany("INSERT INTO itemCreators VALUES (?, ?, ?)", [(1, 2, 1), (1, 1, 0)])
    conn.executemany(
        "INSERT INTO itemAttachments VALUES (?, ?, ?, ?)",
        [(2, 1, 0, "application/pdf"), (5, 1, 1, "text/html")],
    )
    conn.execute("INSERT INTO itemNotes VALUES (6, 1, '<p>note</p>')")
    conn.executemany(
        "INSERT INTO itemAnnotations VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (3, 2, 1, "A", None, "#ffd400", "1", "00000|000100|00010", _position(0)),
            (4, 2, 5, "B", "Check this", "#5fb236", "2", "00001|000050|00020", _position(1)),
            (7, 2, 4, None, None, "#2ea8e5", "1", "00000|000000|00000", _position(0)),
        ],
    )
    conn.executemany("INSERT INTO tags VALUES (?, ?)", [(1, "key-idea"), (2, "attention")])
    conn.executemany("INSERT INTO itemTags (itemID, tagID) VALUES (?, ?)", [(3, 1), (3, 2)])
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def zotero_db(tmp_path: Path) -> Path:
    """Path to a freshly built zotero.sqlite."""
    return build_zotero_db(tmp_path / "zotero.sqlite")
