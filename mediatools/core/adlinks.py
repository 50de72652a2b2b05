"""Markup snippets linking uploaded media on a known media server."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

SERVER_BASE_URLS = {
    "aldi": "https://aldimediaeu.blob.core.windows.net/aldimediaeu/",
    "s3": "https://s3media-ml-eu.surveycenter.com/",
}

IMAGE_EXTENSIONS = {"jpg", "png"}
AD_IMAGE_TEMPLATE = '<img src="{url}" class="zoomImage" style="max-width:80%">'
STORY_IMAGE_TEMPLATE = '<img src="{url}" class="zoomImage" style="max-height:280px">'


@dataclass(frozen=True)
class AdLinkBlocks:
    ads: str
    story: str


def normalize_folder(folder: str) -> str:
    """Whitespace becomes ``/``, slashes collapse, one edge slash is trimmed, ``/`` appended."""

    path = re.sub(r"/+", "/", re.sub(r"\s+", "/", folder.strip()))
    return re.sub(r"^/|/$", "", path) + "/"


def parse_filenames(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def generate_ad_links(server: str, folder: str, filenames: Iterable[str]) -> AdLinkBlocks:
    """Build the ad-exposure block and the storyboard block.

    Images get an ``<img>`` tag in both blocks. Videos appear as a bare URL in
    the ad block and as their ``.jpg`` poster in the story block. Audio is a
    bare URL in the ad block and a bare filename in the story block. Anything
    else is ignored.
    """

    base = SERVER_BASE_URLS.get(server, "") + normalize_folder(folder)
    ads: list[str] = []
    story: list[str] = []
    for raw in filenames:
        name = raw.strip()
        if not name:
            continue
        ext = name.rsplit(".", 1)[-1].lower()
        url = base + name
        if ext in IMAGE_EXTENSIONS:
            ads.append(AD_IMAGE_TEMPLATE.format(url=url))
            story.append(STORY_IMAGE_TEMPLATE.format(url=url))
        elif ext == "mp4":
            ads.append(url)
            story.append(STORY_IMAGE_TEMPLATE.format(url=base + name.replace(".mp4", ".jpg", 1)))
        elif ext == "mp3":
            ads.append(url)
            story.append(name)
    return AdLinkBlocks(ads="\n\n".join(ads), story="\n".join(story))
