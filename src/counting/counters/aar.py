"""Android archive (.aar) helpers."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import zipfile

logger = logging.getLogger(__name__)

CLASSES_JAR = "classes.jar"


def extract_classes_jar(aar_path: str, dest_path: str) -> bool:
    """Extract ``classes.jar`` from an .aar to ``dest_path``.

    An existing ``dest_path`` is reused as-is. The jar is written to a
    temporary file next to ``dest_path`` and moved into place, so a
    half-written jar is never picked up by a later run.

    Returns:
        True if the archive holds classes; False for a resources-only .aar.

    Raises:
        OSError: If the archive cannot be read or the jar cannot be written.
        zipfile.BadZipFile: If ``aar_path`` is not a zip archive.
    """
    if os.path.exists(dest_path):
        logger.debug("Reusing extracted %s", dest_path)
        return True

    with zipfile.ZipFile(aar_path) as archive:
        try:
            info = archive.getinfo(CLASSES_JAR)
        except KeyError:
            logger.debug("No %s in %s; resources-only archive", CLASSES_JAR, aar_path)
            return False

        dest_dir = os.path.dirname(dest_path) or "."
        fd, tmp_path = tempfile.mkstemp(suffix=".jar", prefix=".extract-", dir=dest_dir)
        try:
            with os.fdopen(fd, "wb") as dest, archive.open(info) as src:
                shutil.copyfileobj(src, dest)
            os.replace(tmp_path, dest_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    return True
