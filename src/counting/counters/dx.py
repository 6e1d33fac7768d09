"""Counts methods and fields by compiling artifacts with the SDK dex tool."""

from __future__ import annotations

import glob
import logging
import os
import subprocess
import tempfile
import zipfile
from typing import List, Optional, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from common.paths import get_config_dir
from constants import Constants

from ..base import ArtifactCounter
from ..errors import CountingError, DexFormatError, UnsupportedFormatError
from ..models import Dependency
from .aar import extract_classes_jar
from .dex import decode_dex_counts, read_dex_file, sum_dex_files
from .tools import D8, DexTool

logger = logging.getLogger(__name__)

JAR = ".jar"
AAR = ".aar"
DEX = ".dex"


class DexToolCounter(ArtifactCounter):
    """ArtifactCounter backed by ``dx`` or ``d8``.

    ``.jar`` files are dexed and the resulting header decoded; ``.aar``
    files have their ``classes.jar`` extracted into the cache first; ``.dex``
    files are decoded directly.
    """

    def __init__(self, tool: DexTool, aar_cache_dir: Optional[str] = None, timeout: Optional[int] = None):
        """Initialize the counter.

        Args:
            tool: The dex compiler to run.
            aar_cache_dir: Where extracted jars are kept. Defaults to the
                "aars" config directory, created on first use.
            timeout: Seconds allowed per tool run.
        """
        self.tool = tool
        self._aar_cache_dir = aar_cache_dir
        self.timeout = timeout if timeout is not None else Constants.DEX_TOOL_TIMEOUT

    @property
    def aar_cache_dir(self) -> str:
        if self._aar_cache_dir is None:
            self._aar_cache_dir = get_config_dir(Constants.AARS_DIR)
        return self._aar_cache_dir

    def count_artifact(self, location: str, dependency: Dependency) -> Tuple[int, int]:
        lower = location.lower()
        if lower.endswith(JAR):
            return self.check_jar(location, dependency)
        if lower.endswith(AAR):
            return self._check_aar(location, dependency)
        if lower.endswith(DEX):
            try:
                return read_dex_file(location)
            except (DexFormatError, OSError) as exc:
                raise CountingError(f"Unable to read {location}: {exc}", dependency) from exc
        raise UnsupportedFormatError(f"Unknown dependency format: {location}", dependency)

    def _check_aar(self, aar_path: str, dependency: Dependency) -> Tuple[int, int]:
        jar_name = str(dependency).replace(":", "-") + JAR
        jar_path = os.path.join(self.aar_cache_dir, jar_name)
        try:
            found = extract_classes_jar(aar_path, jar_path)
        except (OSError, zipfile.BadZipFile) as exc:
            raise CountingError(f"Unable to extract classes from {aar_path}: {exc}", dependency) from exc
        if not found:
            # resources-only .aar
            return 0, 0
        return self.check_jar(jar_path, dependency)

    def check_jar(self, jar_path: str, dependency: Dependency) -> Tuple[int, int]:
        """Dex a jar and return ``(methods, fields)``."""
        with Timer() as t:
            if self.tool.kind == D8:
                counts = self._run_d8(jar_path, dependency)
            else:
                counts = self._run_dx(jar_path, dependency)
        if is_debug_enabled(logger):
            logger.debug(
                "Dexed artifact",
                extra=extra_context(
                    event="tool_exit",
                    component="dex_counter",
                    action=self.tool.kind,
                    target=os.path.basename(jar_path),
                    outcome="success",
                    duration_ms=t.duration_ms(),
                ),
            )
        return counts

    def _run_dx(self, jar_path: str, dependency: Dependency) -> Tuple[int, int]:
        # Some libraries only dex with --core-library; retry once with it
        # See: https://github.com/dextorer/MethodsCount/blob/master/app/services/sdk_service.rb
        attempts = [
            [self.tool.path, "--dex", "--output=-", jar_path],
            [self.tool.path, "--dex", "--core-library", "--output=-", jar_path],
        ]
        last_error: Optional[Exception] = None
        for cmd in attempts:
            try:
                output = self._run(cmd)
            except CountingError as exc:
                last_error = exc
                continue
            try:
                return decode_dex_counts(output)
            except DexFormatError as exc:
                raise CountingError(f"Unexpected dx output for {dependency}: {exc}", dependency) from exc
        raise CountingError(f"dx failed for {dependency}: {last_error}", dependency) from last_error

    def _run_d8(self, jar_path: str, dependency: Dependency) -> Tuple[int, int]:
        with tempfile.TemporaryDirectory(prefix="dexcount-d8-") as out_dir:
            try:
                self._run([self.tool.path, "--output", out_dir, jar_path])
            except CountingError as exc:
                raise CountingError(f"d8 failed for {dependency}: {exc}", dependency) from exc
            dex_files: List[str] = sorted(glob.glob(os.path.join(out_dir, "classes*.dex")))
            if not dex_files:
                return 0, 0
            try:
                return sum_dex_files(dex_files)
            except (DexFormatError, OSError) as exc:
                raise CountingError(f"Unexpected d8 output for {dependency}: {exc}", dependency) from exc

    def _run(self, cmd: List[str]) -> bytes:
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CountingError(f"{os.path.basename(cmd[0])} timed out after {self.timeout} seconds") from exc
        except OSError as exc:
            raise CountingError(f"Unable to run {cmd[0]}: {exc}") from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            logger.debug("Running %s failed (%d): %s", " ".join(cmd), proc.returncode, stderr)
            raise CountingError(f"exit status {proc.returncode}: {stderr}")
        return proc.stdout
