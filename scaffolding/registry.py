"""Package registry client for template discovery and download.

Supports:
- Searching the registry for templates
- Looking up a template version and its tarball
- Downloading and extracting the tarball into a scratch directory
"""

import logging
import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import Any, Optional

import requests

from schemas.template import TemplateRef

from .errors import DownloadError, PackageDetailError, SearchError


logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org/"
DEFAULT_SEARCH_TEXT = "@any-tools"
DEFAULT_SEARCH_SIZE = 100
DEFAULT_TIMEOUT = 30

# Directory every package tarball wraps its content in
PACKAGE_ROOT = "package"

SCRATCH_DIR_NAME = "create-tools-boilerplate"


def default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir()) / SCRATCH_DIR_NAME


class ScratchDirectory:
    """Fixed extraction workspace, reused across runs.

    Acquiring clears whatever a previous run left behind. The path is
    shared by every process on the machine and is not locked.

    Usage:
        with ScratchDirectory(path) as scratch:
            template_dir = client.download(ref, scratch)
    """

    def __init__(self, path: Path | None = None, keep: bool = False):
        """Initialize scratch directory.

        Args:
            path: Workspace location (default: <tmp>/create-tools-boilerplate)
            keep: Leave the extracted files in place on release
        """
        self.path = Path(path or default_scratch_dir())
        self.keep = keep

    def acquire(self) -> Path:
        """Clear the directory if it exists, then create it."""
        if self.path.exists() or self.path.is_symlink():
            self._remove()
        self.path.mkdir(parents=True)
        return self.path

    def release(self) -> None:
        """Remove the directory unless asked to keep it."""
        if self.keep:
            return
        if self.path.exists():
            self._remove()

    def _remove(self) -> None:
        logger.debug("Clearing scratch directory %s", self.path)
        if self.path.is_dir() and not self.path.is_symlink():
            shutil.rmtree(self.path)
        else:
            self.path.unlink()

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(self, *args) -> None:
        self.release()


class RegistryClient:
    """Client for the package registry that hosts templates.

    Usage:
        client = RegistryClient()
        templates = client.search()
        template_dir = client.download(templates[0], scratch_path)
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize registry client.

        Args:
            registry_url: Registry base URL
            timeout: Per-request timeout in seconds
            session: HTTP session (default: new requests session)
        """
        self.registry_url = registry_url.rstrip("/") + "/"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        response = self.session.get(
            url,
            params=params,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def search(
        self,
        text: str = DEFAULT_SEARCH_TEXT,
        size: int = DEFAULT_SEARCH_SIZE,
    ) -> list[TemplateRef]:
        """Search the registry for templates.

        Args:
            text: Search text
            size: Maximum number of results

        Returns:
            Matching templates (possibly empty)

        Raises:
            SearchError: If the registry cannot be queried
        """
        url = f"{self.registry_url}-/v1/search"
        try:
            data = self._get_json(url, params={"text": text, "size": size})
            return [
                TemplateRef(name=item["package"]["name"], version=item["package"]["version"])
                for item in data.get("objects", [])
            ]
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            raise SearchError(f"Failed to search templates: {e}") from e

    def get_package_detail(self, template: TemplateRef) -> dict[str, Any]:
        """Fetch the registry document of one template version.

        Args:
            template: Template name and version

        Returns:
            Version metadata, including dist.tarball

        Raises:
            PackageDetailError: On network, HTTP or JSON errors
        """
        url = f"{self.registry_url}{template.name}/{template.version}"
        try:
            data = self._get_json(url)
        except (requests.RequestException, ValueError) as e:
            raise PackageDetailError(f"Failed to fetch package detail for {template}: {e}") from e

        if not isinstance(data, dict):
            raise PackageDetailError(f"Unexpected package detail for {template}")
        return data

    def resolve(self, spec: str) -> TemplateRef:
        """Resolve name[@version] into an exact template reference.

        A missing version resolves through the ``latest`` dist-tag.

        Args:
            spec: Template name, optionally with @version

        Returns:
            TemplateRef with an exact version
        """
        name, version = parse_template_spec(spec)
        detail = self.get_package_detail(TemplateRef(name=name, version=version or "latest"))
        resolved = detail.get("version") or version
        if not resolved:
            raise PackageDetailError(f"No version found for {name}")
        return TemplateRef(name=detail.get("name", name), version=resolved)

    def tarball_url(self, template: TemplateRef) -> str:
        """Get the archive URL of a template version."""
        detail = self.get_package_detail(template)
        try:
            return detail["dist"]["tarball"]
        except (KeyError, TypeError) as e:
            raise PackageDetailError(f"Package detail for {template} has no dist.tarball") from e

    def download(self, template: TemplateRef, scratch_dir: Path) -> Path:
        """Download a template and extract it into the scratch directory.

        Args:
            template: Template to download
            scratch_dir: Acquired scratch directory

        Returns:
            Path to the extracted package root

        Raises:
            PackageDetailError: If the version lookup fails
            DownloadError: If the archive cannot be downloaded or extracted
        """
        url = self.tarball_url(template)
        logger.info("Downloading %s from %s", template, url)

        try:
            with self.session.get(url, stream=True, allow_redirects=True, timeout=self.timeout) as response:
                response.raise_for_status()
                response.raw.decode_content = True
                with tarfile.open(fileobj=response.raw, mode="r|gz") as tar:
                    # Templates may carry symlinks pointing outside the payload
                    tar.extractall(scratch_dir, filter="tar")
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download template {template}: {e}") from e
        except (tarfile.TarError, OSError) as e:
            raise DownloadError(f"Failed to extract template {template}: {e}") from e

        return Path(scratch_dir) / PACKAGE_ROOT


def parse_template_spec(spec: str) -> tuple[str, str | None]:
    """Split name[@version], keeping the scope of @scope/name.

    Examples:
        >>> parse_template_spec("@any-tools/react@1.0.0")
        ('@any-tools/react', '1.0.0')
        >>> parse_template_spec("vue-starter")
        ('vue-starter', None)
    """
    spec = spec.strip()
    at = spec.rfind("@")
    if at > 0:
        return spec[:at], spec[at + 1:] or None
    return spec, None
