"""Enumerate candidate documents and images on disk.

Scanning only lists files; it never extracts or persists anything.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import Any, Collection, Dict, Iterable, List, Sequence
from xml.parsers.expat import ExpatError

from homeindex.config import DOCUMENT_EXTENSIONS, IMAGE_EXTENSIONS, AppConfig
from homeindex.models import ScanError, ScanGroup
from homeindex.utils.files import file_record, scan_directory

LOGGER = logging.getLogger(__name__)

IPHOTO_LIBRARY = "iPhoto Library"
IPHOTO_CATALOG = "AlbumData.xml"
PHOTOS_LIBRARY = "Photos Library.photoslibrary"


class PhotoLibraryScanner:
    """Scan a pictures folder holding iPhoto and Photos libraries.

    Every album of an iPhoto catalog becomes its own group so per-album counts
    are visible. Without a usable catalog the library is scanned flat.
    """

    def __init__(self, pictures_dir: Path, extensions: Collection[str] = IMAGE_EXTENSIONS) -> None:
        self.pictures_dir = Path(pictures_dir).expanduser()
        self.extensions = frozenset(ext.lower() for ext in extensions)

    def scan(self) -> List[ScanGroup]:
        if not self.pictures_dir.is_dir():
            LOGGER.debug("Pictures directory %s not found", self.pictures_dir)
            return []

        groups: List[ScanGroup] = []
        iphoto = self.pictures_dir / IPHOTO_LIBRARY
        if iphoto.is_dir():
            groups.extend(self.scan_iphoto_library(iphoto))

        originals = self.pictures_dir / PHOTOS_LIBRARY / "originals"
        if originals.is_dir():
            groups.append(scan_directory(originals, self.extensions, name="Photos Library Originals"))

        groups.append(scan_directory(self.pictures_dir, self.extensions, name="Pictures Directory"))
        return groups

    def scan_iphoto_library(self, library: Path) -> List[ScanGroup]:
        catalog_path = library / IPHOTO_CATALOG
        catalog: Dict[str, Any] | None = None
        catalog_error: ScanError | None = None

        if catalog_path.is_file():
            try:
                with catalog_path.open("rb") as handle:
                    catalog = plistlib.load(handle)
                if not isinstance(catalog, dict) or not isinstance(catalog.get("List"), list):
                    raise ValueError("catalog has no album list")
            except (ExpatError, ValueError, OSError) as exc:
                LOGGER.error("Malformed photo catalog %s: %s", catalog_path, exc)
                catalog = None
                catalog_error = ScanError(error=f"Malformed catalog: {exc}", file=str(catalog_path))

        if catalog is None:
            group = scan_directory(library, self.extensions, name=library.name)
            if catalog_error is not None:
                group.errors.insert(0, catalog_error)
            return [group]

        masters = library / "Masters"
        master_list = catalog.get("Master Image List") or {}
        groups = [self._album_group(album, library, masters, master_list) for album in catalog["List"]]
        if masters.is_dir():
            groups.append(scan_directory(masters, self.extensions, name="Masters"))
        return groups

    def _album_group(
        self,
        album: Any,
        library: Path,
        masters: Path,
        master_list: Dict[str, Any],
    ) -> ScanGroup:
        if not isinstance(album, dict):
            return ScanGroup(name="Unknown Album", errors=[ScanError(error="Album entry is not a dictionary")])

        group = ScanGroup(name=str(album.get("AlbumName") or "Unknown Album"))
        for key in album.get("KeyList") or []:
            path = self._resolve_key(str(key), library, masters, master_list)
            if path is None or not path.is_file():
                continue
            if path.suffix.lower() not in self.extensions:
                continue
            try:
                group.files.append(file_record(path.absolute()))
            except OSError as exc:
                LOGGER.error("Error processing album image %s: %s", key, exc)
                group.errors.append(ScanError(error=str(exc), file=str(path)))
        return group

    @staticmethod
    def _resolve_key(key: str, library: Path, masters: Path, master_list: Dict[str, Any]) -> Path | None:
        entry = master_list.get(key)
        if isinstance(entry, dict) and entry.get("ImagePath"):
            image_path = Path(str(entry["ImagePath"]))
            return image_path if image_path.is_absolute() else library / image_path
        return masters / key


class FilesystemScanner:
    """Enumerate documents and images under the configured roots."""

    def __init__(
        self,
        document_dirs: Sequence[Path],
        image_dirs: Sequence[Path],
        *,
        photo_library: PhotoLibraryScanner | None = None,
        document_extensions: Collection[str] = DOCUMENT_EXTENSIONS,
        image_extensions: Collection[str] = IMAGE_EXTENSIONS,
    ) -> None:
        self.document_dirs = [Path(d) for d in document_dirs]
        self.image_dirs = [Path(d) for d in image_dirs]
        self.photo_library = photo_library
        self.document_extensions = frozenset(document_extensions)
        self.image_extensions = frozenset(image_extensions)

    @classmethod
    def from_config(cls, config: AppConfig) -> "FilesystemScanner":
        library = PhotoLibraryScanner(config.pictures_dir) if config.scan_photo_library else None
        return cls(config.document_dirs, config.image_dirs, photo_library=library)

    def scan_documents(self) -> List[ScanGroup]:
        return self._scan_roots(self.document_dirs, self.document_extensions)

    def scan_images(self) -> List[ScanGroup]:
        groups = self._scan_roots(self.image_dirs, self.image_extensions)
        if self.photo_library is not None:
            groups.extend(self.photo_library.scan())
        return groups

    @staticmethod
    def _scan_roots(roots: Iterable[Path], extensions: Collection[str]) -> List[ScanGroup]:
        return [scan_directory(root, extensions) for root in roots if root.exists()]
