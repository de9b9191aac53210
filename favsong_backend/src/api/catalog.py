"""
Song catalog loaded from a tab-separated file.

The catalog is read once when the application is created and never mutated
afterwards; request handlers only read from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Song:
    """One catalog entry."""

    id: str
    name: str
    artist: str = ""
    album_artist: str = ""
    album: str = ""
    year: str = ""
    genre: str = ""
    vocal: str = ""
    url: str = ""


class Catalog:
    """Immutable, ordered collection of songs with lookup by id."""

    def __init__(self, songs: Iterable[Song]) -> None:
        ordered: List[Song] = []
        index: Dict[str, Song] = {}
        for song in songs:
            if song.id in index:
                logger.warning("catalog_duplicate_id: song_id=%s (keeping first occurrence)", song.id)
                continue
            index[song.id] = song
            ordered.append(song)
        self._songs: Tuple[Song, ...] = tuple(ordered)
        self._index: Mapping[str, Song] = MappingProxyType(index)

    def __iter__(self) -> Iterator[Song]:
        return iter(self._songs)

    def __len__(self) -> int:
        return len(self._songs)

    def __contains__(self, song_id: object) -> bool:
        return song_id in self._index

    @property
    def songs(self) -> Tuple[Song, ...]:
        return self._songs

    def get(self, song_id: str) -> Optional[Song]:
        return self._index.get(song_id)


def _cell(row: Dict[str, str], *columns: str) -> str:
    # First non-empty column wins ("Display Url" before "Url").
    for column in columns:
        value = row.get(column, "")
        if value:
            return value
    return ""


def parse_songs_tsv(text: str) -> List[Song]:
    """
    Parse catalog TSV text into songs.

    The first non-blank line is the header. Cells are split on tabs with no
    quoting; missing cells become empty strings. Rows without an Id are skipped.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    header = [h.strip() for h in lines[0].split("\t")]
    songs: List[Song] = []
    for line_no, line in enumerate(lines[1:], start=2):
        values = line.split("\t")
        row = {h: (values[i].strip() if i < len(values) else "") for i, h in enumerate(header)}

        song_id = row.get("Id", "")
        if not song_id:
            logger.warning("catalog_row_skipped: line=%s reason=missing_id", line_no)
            continue

        songs.append(
            Song(
                id=song_id,
                name=row.get("Title", ""),
                artist=row.get("Artist", ""),
                album_artist=row.get("Album Artist", ""),
                album=row.get("Album", ""),
                year=row.get("Year", ""),
                genre=row.get("Genre", ""),
                vocal=row.get("Vocal", ""),
                url=_cell(row, "Display Url", "Url"),
            )
        )
    return songs


# PUBLIC_INTERFACE
def load_catalog(path: Path) -> Catalog:
    """
    Read the catalog file at `path` into a Catalog.

    Raises:
        RuntimeError: if the file does not exist or cannot be read.
    """
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise RuntimeError(f"Song catalog could not be read from {path}: {exc}") from exc

    catalog = Catalog(parse_songs_tsv(text))
    logger.info("catalog_loaded: path=%s songs=%s", str(path), len(catalog))
    return catalog
