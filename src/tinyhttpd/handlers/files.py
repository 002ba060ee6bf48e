"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files below a single root directory:

    GET  /files/{name}   → 200 + file bytes, or 404
    POST /files/{name}   → body stored as {root}/{name}, 201

=============================================================================
PATH TRAVERSAL
=============================================================================

The filename comes straight from the URL, so it can contain "..":

    POST /files/../../home/user/.bashrc

    root = /tmp/data
    join = /tmp/data/../../home/user/.bashrc
    resolve() → /home/user/.bashrc          ← outside the root!

Every target is resolved (normalizing ".." and following symlinks) and
then checked with relative_to(root). A target outside the root is
treated like any other failure of that route: 404 for GET, 500 for POST.
The attempt is logged at WARNING.

=============================================================================
WRITE SEQUENCE
=============================================================================

    ┌───────────────────────────────┬────────────────────────────────────┐
    │ Step                          │ On failure                         │
    ├───────────────────────────────┼────────────────────────────────────┤
    │ 1. resolve + containment      │ 500                                │
    │ 2. open target "wb"           │ 500 (missing parent, permissions)  │
    │ 3. read Content-Length bytes  │ 400 (client sent too little)       │
    │ 4. write bytes                │ 500                                │
    │ 5. done                       │ 201                                │
    └───────────────────────────────┴────────────────────────────────────┘

The file is opened BEFORE the body is read, so a short body leaves an
empty (truncated) file behind. Existing files are overwritten. Parent
directories are never created.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.request import HTTPRequest, IncompleteBodyError
from ..http.response import HTTPResponse, bad_request, created, internal_error, not_found, ok_binary


logger = logging.getLogger(__name__)


class FileHandler:
    """
    GET/POST handler for files under `root_dir`.

    =========================================================================
    USAGE
    =========================================================================

        files = FileHandler(config.directory)

        Route("GET", "/files/*filename", files.read)
        Route("POST", "/files/*filename", files.write)

    `root_dir=None` means no directory was configured. The routes still
    exist but every GET answers 404 and every POST answers 500.

    =========================================================================
    """

    def __init__(self, root_dir: Optional[str]):
        self.root_dir: Optional[Path] = Path(root_dir).resolve() if root_dir else None

        if self.root_dir is not None and not self.root_dir.is_dir():
            logger.warning(f"File root is not a directory: {self.root_dir}")

    def resolve(self, filename: str) -> Optional[Path]:
        """
        Map a URL filename to a path inside the root.

        Returns:
            The resolved path, or None if no root is configured or the
            name escapes the root.
        """
        if self.root_dir is None:
            return None

        try:
            # resolve() follows symlinks and normalizes .. components
            full_path = (self.root_dir / filename.lstrip("/")).resolve()
        except (OSError, ValueError) as e:
            # e.g. an embedded NUL byte
            logger.warning(f"Unusable file name {filename!r}: {e}")
            return None

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {filename!r}")
            return None

        return full_path

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the whole file as application/octet-stream.

        Missing files, directories, unreadable files and rejected paths
        all answer 404 with an empty body.
        """
        path = self.resolve(request.path_params.get("filename", ""))
        if path is None:
            return not_found()

        try:
            data = path.read_bytes()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            return not_found()

        return ok_binary(data)

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """Store exactly Content-Length body bytes under the root (see WRITE SEQUENCE)."""
        path = self.resolve(request.path_params.get("filename", ""))
        if path is None:
            return internal_error()

        try:
            f = open(path, "wb")
        except (OSError, ValueError) as e:
            logger.error(f"Cannot create {path}: {e}")
            return internal_error()

        with f:
            try:
                data = request.read_body()
            except IncompleteBodyError as e:
                logger.info(f"Short upload for {path}: {e}")
                return bad_request()

            try:
                f.write(data)
            except OSError as e:
                logger.error(f"Cannot write {path}: {e}")
                return internal_error()

        logger.debug(f"Stored {len(data)} bytes in {path}")
        return created()
