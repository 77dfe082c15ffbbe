"""
Bundles staged downloads into a single ZIP archive.
"""

import logging
import os
import zipfile
from pathlib import Path
from typing import Iterable

from zipjob.exceptions import PackagingError
from zipjob.utils.formatting import format_error, format_size

log = logging.getLogger(__name__)


def pack(output_path: Path, files: Iterable[Path]) -> Path:
    """
    Writes `files` into a ZIP archive at `output_path`.

    Entries are named by basename, in the given order. Two inputs with the same
    basename both get written; extractors keep the last one. The archive is
    built next to the target as `<name>.tmp` and moved into place only once it
    is complete, so a failure leaves any previous archive untouched.

    This function blocks; call it through `asyncio.to_thread` from async code.

    Raises:
        PackagingError: if any input cannot be read or the archive cannot be
            written.
    """
    output_path = Path(output_path)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for file_path in files:
                file_path = Path(file_path)
                zf.write(file_path, arcname=file_path.name)
        os.replace(tmp_path, output_path)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            log.debug(f"Could not remove partial archive '{tmp_path}': {cleanup_error}")
        raise PackagingError(format_error(e)) from e

    log.debug(
        f"Packed archive '{output_path.name}' ({format_size(output_path.stat().st_size)})"
    )
    return output_path
