"""
Module: importer
Purpose: Turn raw input files and zip archives into image payloads.
"""

import io
import mimetypes
import os
import re
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from .exceptions import ArchiveDecodeError, InputError
from .models.payload import ImagePayload
from .utils import log_error, log_info, log_warning

# Raw input files use the same shape as payloads: name, bytes, declared type.
InputFile = ImagePayload

ARCHIVE_IMAGE_PATTERN = re.compile(r"\.(jpe?g|png|gif|webp)$", re.IGNORECASE)
IMAGE_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


@dataclass
class ImportResult:
    """
    Images collected from one batch of inputs plus per-archive failures.
    """

    images: List[ImagePayload] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def error_message(self) -> Optional[str]:
        if not self.errors:
            return None
        return f"Some files failed to process: {'; '.join(self.errors)}"


def _extension(filename: str) -> str:
    _, dot, ext = filename.rpartition(".")
    return ext.lower() if dot else ""


def guess_content_type(filename: str) -> str:
    known = IMAGE_CONTENT_TYPES.get(_extension(filename))
    if known:
        return known
    if _extension(filename) == "zip":
        return "application/zip"
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or ""


def is_archive(file: InputFile) -> bool:
    return "zip" in (file.content_type or "") or _extension(file.filename) == "zip"


def is_image(file: InputFile) -> bool:
    return (file.content_type or "").startswith("image/")


def extract_images_from_zip(archive: InputFile) -> List[ImagePayload]:
    """
    Read image entries out of a zip archive.

    Args:
        archive: Zip input file.

    Returns:
        Payloads for every non-directory entry with an image extension, in
        archive order, named by the entry's base name.

    Raises:
        ArchiveDecodeError: If the archive is corrupt or unsupported.
    """
    try:
        images: List[ImagePayload] = []
        with zipfile.ZipFile(io.BytesIO(archive.data)) as zf:
            for info in zf.infolist():
                if info.is_dir() or not ARCHIVE_IMAGE_PATTERN.search(info.filename):
                    continue
                filename = info.filename.rsplit("/", 1)[-1] or info.filename
                images.append(
                    ImagePayload(
                        filename=filename,
                        data=zf.read(info),
                        content_type=guess_content_type(filename),
                    )
                )
        return images
    except Exception as exc:
        log_error(f"Error reading zip file {archive.filename}: {exc}")
        raise ArchiveDecodeError(
            f"Failed to read {archive.filename}. It may be corrupt or an unsupported format."
        ) from exc


def _extract_isolated(archive: InputFile) -> tuple[List[ImagePayload], Optional[str]]:
    try:
        return extract_images_from_zip(archive), None
    except ArchiveDecodeError as exc:
        return [], str(exc)


def collect_images(inputs: List[InputFile]) -> ImportResult:
    """
    Split inputs into direct images and archives, decode archives in
    parallel, and gather everything into one result.

    Args:
        inputs: Raw input files.

    Returns:
        ImportResult with direct images first (input order) followed by
        archive contents (archive order). Inputs that are neither images
        nor archives are dropped. A failing archive only adds an error.
    """
    result = ImportResult()
    archives: List[InputFile] = []
    dropped = 0
    for file in inputs:
        if is_archive(file):
            archives.append(file)
        elif is_image(file):
            result.images.append(file)
        else:
            dropped += 1

    if archives:
        with ThreadPoolExecutor() as executor:
            outcomes = list(executor.map(_extract_isolated, archives))
        for images, error in outcomes:
            result.images.extend(images)
            if error:
                result.errors.append(error)

    if dropped:
        log_info(f"Ignored {dropped} input file(s) that are neither images nor zip archives")
    if result.errors:
        log_warning(result.error_message or "")
    return result


def _read_file(path: str) -> InputFile:
    with open(path, "rb") as handle:
        data = handle.read()
    name = os.path.basename(path)
    return InputFile(filename=name, data=data, content_type=guess_content_type(name))


def read_input_paths(paths: List[str]) -> List[InputFile]:
    """
    Load files and directory trees from disk as raw input files.

    Args:
        paths: Files or directories. Directories are walked recursively in
            sorted order; symlinks are skipped.

    Returns:
        Input files in discovery order.

    Raises:
        InputError: If a path does not exist or a file cannot be read.
    """
    if not paths:
        raise InputError("Please select some images first.")
    inputs: List[InputFile] = []
    for raw in paths:
        path = os.path.abspath(raw)
        if not os.path.exists(path):
            log_error(f"Path does not exist: {path}")
            raise InputError(f"Path does not exist: {path}")
        if os.path.isfile(path):
            candidates = [path]
        else:
            candidates = []
            for root, dirs, files in os.walk(path, topdown=True, followlinks=False):
                dirs[:] = sorted(d for d in dirs if not os.path.islink(os.path.join(root, d)))
                for name in sorted(files):
                    file_path = os.path.join(root, name)
                    if os.path.islink(file_path):
                        log_warning(f"Skipping symlinked file during import: {file_path}")
                        continue
                    candidates.append(file_path)
        for candidate in candidates:
            try:
                inputs.append(_read_file(candidate))
            except OSError as exc:
                log_error(f"Failed to read {candidate}: {exc}")
                raise InputError(f"Failed to read {candidate}") from exc
    return inputs
