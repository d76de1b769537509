from typing import Optional

from roadblock.schemas import ImageLinks

CLOUDINARY_BASE_URL = 'https://res.cloudinary.com'

THUMBNAIL = 'c_thumb,h_250,w_250/f_auto,q_auto'
UPLOAD_THUMBNAIL = 'c_thumb,h_80,w_80/r_5/f_auto,q_auto'
FULL_IMAGE = 'f_auto,q_auto'


def image_url(cloud_name: str, public_id: Optional[str], transformation: str = '') -> Optional[str]:
    if not cloud_name or not public_id:
        return None
    parts = [CLOUDINARY_BASE_URL, cloud_name, 'image', 'upload']
    if transformation:
        parts.append(transformation)
    parts.append(public_id.lstrip('/'))
    return '/'.join(parts)


def thumbnail_url(cloud_name: str, public_id: Optional[str]) -> Optional[str]:
    return image_url(cloud_name, public_id, THUMBNAIL)


def upload_thumbnail_url(cloud_name: str, public_id: Optional[str]) -> Optional[str]:
    return image_url(cloud_name, public_id, UPLOAD_THUMBNAIL)


def full_image_url(cloud_name: str, public_id: Optional[str]) -> Optional[str]:
    return image_url(cloud_name, public_id, FULL_IMAGE)


def image_links(cloud_name: str, public_id: Optional[str]) -> ImageLinks:
    return ImageLinks(
        thumbnail=thumbnail_url(cloud_name, public_id),
        upload_thumbnail=upload_thumbnail_url(cloud_name, public_id),
        full=full_image_url(cloud_name, public_id),
    )
