import hashlib
import zipfile
from pathlib import Path

import aiohttp

from mailbox_provision.errors import DownloadError
from mailbox_provision.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 8192


async def download_url(url: str, dest: Path) -> None:
    """Download url to dest, removing any partial file on failure."""
    logger.debug({"event": "download_start", "url": url, "dest": str(dest)})
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as response:
                if response.status != 200:
                    raise DownloadError(url, f"HTTP status {response.status}")

                with open(dest, "wb") as f:
                    while chunk := await response.content.read(CHUNK_SIZE):
                        f.write(chunk)

    except DownloadError:
        dest.unlink(missing_ok=True)
        raise
    except (aiohttp.ClientError, OSError) as e:
        dest.unlink(missing_ok=True)
        raise DownloadError(url, str(e)) from e

    logger.debug({"event": "download_complete", "url": url, "dest": str(dest)})


def compute_file_sha1(path: Path) -> str:
    """Compute SHA-1 hash of a file."""
    sha1_hash = hashlib.sha1()
    with open(path, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha1_hash.update(byte_block)
    return sha1_hash.hexdigest()


def extract_archive(archive_path: Path, dest_dir: Path) -> Path:
    """Extract a zip archive into dest_dir."""
    if archive_path.suffix != ".zip":
        raise ValueError(f"Unsupported archive format: {archive_path.suffix}")

    with zipfile.ZipFile(archive_path) as archive:
        archive.extractall(dest_dir)

    logger.debug(
        {
            "event": "archive_extracted",
            "archive": str(archive_path),
            "extracted_to": str(dest_dir),
        }
    )
    return dest_dir
