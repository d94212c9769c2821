"""
Rewrite relative asset paths (e.g. ``/uploads/projects/x.png``) against the
configured PUBLIC_BASE_URL.
"""
from typing import Any, Dict, Iterable, Optional

import config

ASSET_FIELDS = ("profileImage", "resumeUrl", "image", "companyLogo")


def absolute_url(path: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    base = config.PUBLIC_BASE_URL if base_url is None else base_url.rstrip("/")
    if not path or not base or path.startswith(("http://", "https://")):
        return path
    return f"{base}{path if path.startswith('/') else '/' + path}"


def with_absolute_urls(item: Dict[str, Any], fields: Iterable[str] = ASSET_FIELDS, base_url: Optional[str] = None) -> Dict[str, Any]:
    transformed = dict(item)
    for field in fields:
        if transformed.get(field):
            transformed[field] = absolute_url(transformed[field], base_url)
    return transformed
