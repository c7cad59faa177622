"""Resolve CMS image references to CDN URLs."""
import re
from typing import Any, Optional
from urllib.parse import urlencode

# image-<asset hash>-<width>x<height>-<extension>
_IMAGE_REF = re.compile(r"^image-(?P<hash>[A-Za-z0-9]+)-(?P<dims>\d+x\d+)-(?P<ext>[a-z0-9]+)$")


class AssetUrlResolver:
    """Build image URLs for a project's dataset on the asset CDN."""

    CDN_BASE = "https://cdn.sanity.io/images"

    def __init__(self, project_id: str, dataset: str):
        self.project_id = project_id
        self.dataset = dataset

    def url_for(
        self,
        image: Any,
        width: Optional[int] = None,
        height: Optional[int] = None
    ) -> Optional[str]:
        """
        Resolve an image field to a fully-qualified URL.

        Args:
            image: Image field ({"asset": {"_ref": ...}}), asset ref string,
                or an absolute URL
            width: Optional target width in pixels
            height: Optional target height in pixels

        Returns:
            URL string, or None if the reference cannot be resolved
        """
        ref = self._extract_ref(image)
        if not ref:
            return None

        if ref.startswith(("http://", "https://")):
            return ref

        match = _IMAGE_REF.match(ref)
        if not match:
            return None

        url = (
            f"{self.CDN_BASE}/{self.project_id}/{self.dataset}/"
            f"{match.group('hash')}-{match.group('dims')}.{match.group('ext')}"
        )

        params = {}
        if width:
            params["w"] = int(width)
        if height:
            params["h"] = int(height)
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    @staticmethod
    def _extract_ref(image: Any) -> Optional[str]:
        if isinstance(image, str):
            return image.strip() or None
        if not isinstance(image, dict):
            return None

        asset = image.get("asset")
        if isinstance(asset, dict):
            ref = asset.get("_ref") or asset.get("url")
            return ref if isinstance(ref, str) and ref else None
        if isinstance(asset, str):
            return asset or None
        return None
