"""Pinned static web assets served by the management daemon."""

import shutil
from pathlib import Path
from typing import Optional, Sequence

import appdirs

from mailbox_provision.assets.fetching import (
    compute_file_sha1,
    download_url,
    extract_archive,
)
from mailbox_provision.errors import ChecksumError, DownloadError
from mailbox_provision.logging import get_logger
from mailbox_provision.types import VendorAsset

logger = get_logger(__name__)

JQUERY_VERSION = "3.6.0"
BOOTSTRAP_VERSION = "5.1.3"
FONTAWESOME_VERSION = "6.1.1"

VENDOR_ASSETS: tuple[VendorAsset, ...] = (
    VendorAsset(
        name="jquery.min.js",
        url=f"https://code.jquery.com/jquery-{JQUERY_VERSION}.min.js",
        sha1="b82d238d4e31fdf618bae8ac11a6c812c03dd0d4",
    ),
    VendorAsset(
        name="bootstrap",
        url=(
            f"https://github.com/twbs/bootstrap/releases/download/v{BOOTSTRAP_VERSION}"
            f"/bootstrap-{BOOTSTRAP_VERSION}-dist.zip"
        ),
        sha1="2b56a45f7108051642bfc446947fc1d626cb1c9f",
        archive_root=f"bootstrap-{BOOTSTRAP_VERSION}-dist",
    ),
    VendorAsset(
        name="fontawesome",
        url=(
            f"https://github.com/FortAwesome/Font-Awesome/releases/download/{FONTAWESOME_VERSION}"
            f"/fontawesome-free-{FONTAWESOME_VERSION}-web.zip"
        ),
        sha1="d712b10472f7209d5284f394ef94a7be71fc2ad3",
        archive_root=f"fontawesome-free-{FONTAWESOME_VERSION}-web",
    ),
)


def default_cache_dir() -> Path:
    return Path(appdirs.user_cache_dir("mailbox-provision")) / "downloads"


async def fetch_asset(asset: VendorAsset, cache_dir: Path) -> Path:
    """Get a verified copy of the asset in cache_dir, downloading if needed."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    cached = cache_dir / f"{asset.sha1}-{Path(asset.url).name}"

    if cached.exists():
        if compute_file_sha1(cached) == asset.sha1:
            logger.debug({"event": "asset_cache_hit", "asset": asset.name, "path": str(cached)})
            return cached
        cached.unlink()

    await download_url(asset.url, cached)

    actual = compute_file_sha1(cached)
    if actual != asset.sha1:
        cached.unlink()
        raise ChecksumError(asset.url, asset.sha1, actual)

    logger.info({"event": "asset_downloaded", "asset": asset.name, "url": asset.url})
    return cached


def place_asset(asset: VendorAsset, source: Path, assets_dir: Path) -> Path:
    """Copy or unpack a fetched asset into assets_dir under its own name."""
    target = assets_dir / asset.name
    if not asset.is_archive:
        shutil.copyfile(source, target)
        return target

    extract_archive(source, assets_dir)
    extracted = assets_dir / asset.archive_root
    if not extracted.is_dir():
        raise DownloadError(asset.url, f"archive has no {asset.archive_root} directory")
    extracted.rename(target)
    return target


async def install_vendor_assets(
    assets_dir: Path,
    assets: Sequence[VendorAsset] = VENDOR_ASSETS,
    cache_dir: Optional[Path] = None,
) -> list[Path]:
    """Replace assets_dir with freshly verified copies of the pinned assets."""
    cache_dir = cache_dir or default_cache_dir()

    shutil.rmtree(assets_dir, ignore_errors=True)
    assets_dir.mkdir(parents=True)

    placed = []
    for asset in assets:
        source = await fetch_asset(asset, cache_dir)
        placed.append(place_asset(asset, source, assets_dir))

    return placed
