"""Provisioning of the helper Gradle workspace used for resolution.

The workspace is a tiny Gradle project whose ``deps`` task prints one
``group|artifact|version|path`` line per resolved artifact, root first.
"""

from __future__ import annotations

import logging
import os
import stat
import textwrap
from typing import Dict, Optional

from common.http_client import download_file
from common.paths import get_config_dir
from constants import Constants

from ..errors import ProvisioningError

logger = logging.getLogger(__name__)

GRADLEW = "gradlew"

_BUILD_GRADLE_TEMPLATE = textwrap.dedent("""\
    repositories {
        google()
        mavenCentral()
    }

    configurations {
        counted
    }

    dependencies {
        if (project.hasProperty('inputDep')) {
            counted project.property('inputDep')
        }
    }

    task deps {
        doLast {
            def input = project.property('inputDep')
            def artifacts = configurations.counted.resolvedConfiguration.resolvedArtifacts
            def coords = { a ->
                def id = a.moduleVersion.id
                "${id.group}:${id.name}:${id.version}".toString()
            }
            def line = { a ->
                def id = a.moduleVersion.id
                "${id.group}|${id.name}|${id.version}|${a.file}"
            }
            def root = artifacts.find { coords(it) == input }
            if (root != null) {
                println line(root)
            } else {
                def parts = input.split(':')
                println "${parts[0]}|${parts[1]}|${parts[2]}|"
            }
            artifacts.findAll { it != root }.each { println line(it) }
        }
    }
""")

_SETTINGS_GRADLE_TEMPLATE = textwrap.dedent("""\
    rootProject.name = 'dexcount-deps'
""")

_WRAPPER_PROPERTIES_TEMPLATE = textwrap.dedent("""\
    distributionBase=GRADLE_USER_HOME
    distributionPath=wrapper/dists
    distributionUrl={distribution_url}
    zipStoreBase=GRADLE_USER_HOME
    zipStorePath=wrapper/dists
""")

# Files fetched from the Gradle project at the configured tool tag
_DOWNLOADS = {
    GRADLEW: "gradlew",
    os.path.join("gradle", "wrapper", "gradle-wrapper.jar"): "gradle/wrapper/gradle-wrapper.jar",
}


def render_templates(gradle_version: Optional[str] = None) -> Dict[str, str]:
    """Return the generated workspace files keyed by relative path."""
    version = gradle_version or Constants.GRADLE_VERSION
    distribution_url = Constants.GRADLE_DISTRIBUTION_URL.format(version=version).replace(":", "\\:")
    return {
        "build.gradle": _BUILD_GRADLE_TEMPLATE,
        "settings.gradle": _SETTINGS_GRADLE_TEMPLATE,
        os.path.join("gradle", "wrapper", "gradle-wrapper.properties"): _WRAPPER_PROPERTIES_TEMPLATE.format(
            distribution_url=distribution_url
        ),
    }


def _is_workspace(path: str) -> bool:
    return os.path.isfile(os.path.join(path, GRADLEW))


def _stamp_matches(path: str) -> bool:
    stamp = os.path.join(path, Constants.GRADLE_STAMP_FILE)
    try:
        with open(stamp, "r", encoding="utf-8") as fh:
            return fh.read().strip() == Constants.GRADLE_TOOL_TAG
    except OSError:
        return False


def provision_workspace(path: str) -> str:
    """Write templates and download the wrapper into ``path``.

    Raises:
        ProvisioningError: If any file cannot be fetched or written.
    """
    logger.info("Setting up Gradle workspace in %s", path)
    try:
        for rel_path, content in render_templates().items():
            full = os.path.join(path, rel_path)
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "w", encoding="utf-8") as fh:
                fh.write(content)
    except OSError as exc:
        raise ProvisioningError(f"Unable to write Gradle workspace {path}: {exc}") from exc

    base = Constants.GRADLE_SOURCE_BASE_URL.rstrip("/")
    for rel_path, remote in _DOWNLOADS.items():
        url = f"{base}/{Constants.GRADLE_TOOL_TAG}/{remote}"
        download_file(url, os.path.join(path, rel_path), context="gradle")

    gradlew = os.path.join(path, GRADLEW)
    try:
        mode = os.stat(gradlew).st_mode
        os.chmod(gradlew, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        with open(os.path.join(path, Constants.GRADLE_STAMP_FILE), "w", encoding="utf-8") as fh:
            fh.write(Constants.GRADLE_TOOL_TAG + "\n")
    except OSError as exc:
        raise ProvisioningError(f"Unable to finish Gradle workspace {path}: {exc}") from exc
    return path


def ensure_gradle_workspace(override: Optional[str] = None) -> str:
    """Return a ready Gradle workspace directory.

    Precedence: ``override`` (``--gradle-dir`` or config), then a local
    ``./gradle`` checkout for development, then the provisioned workspace
    under the config directory.

    Raises:
        ProvisioningError: If the workspace cannot be set up.
    """
    override = override or Constants.GRADLE_DIR_OVERRIDE
    if override:
        if not _is_workspace(override):
            raise ProvisioningError(f"No {GRADLEW} found in Gradle directory: {override}")
        return override

    if _is_workspace(Constants.GRADLE_LOCAL_DIR):
        logger.debug("Using local Gradle workspace %s", Constants.GRADLE_LOCAL_DIR)
        return Constants.GRADLE_LOCAL_DIR

    try:
        path = get_config_dir(Constants.GRADLE_DIR)
    except OSError as exc:
        raise ProvisioningError(f"Unable to create config directory: {exc}") from exc
    if _is_workspace(path) and _stamp_matches(path):
        return path
    return provision_workspace(path)
