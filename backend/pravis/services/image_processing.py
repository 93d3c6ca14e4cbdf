import base64
import binascii
import io
import re
from typing import Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from pravis.core.errors import ImageProcessingError

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def is_data_uri(ref: Optional[str]) -> bool:
    return bool(ref) and ref.startswith("data:")


def split_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Returns (mime_type, raw_bytes) for a base64 data URI.
    """
    m = _DATA_URI_RE.match(data_uri.strip())
    if not m:
        raise ImageProcessingError("Image must be a base64 data URI: data:<mimetype>;base64,<data>")
    try:
        raw = base64.b64decode(m.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageProcessingError(f"Invalid base64 image payload: {e}")
    return m.group("mime"), raw


def resize_to_max_edge(img: Image.Image, max_edge: int) -> Image.Image:
    w, h = img.size
    if max(w, h) <= max_edge:
        return img
    if w >= h:
        new_w = max_edge
        new_h = max(int(h * (max_edge / w)), 1)
    else:
        new_h = max_edge
        new_w = max(int(w * (max_edge / h)), 1)
    return img.resize((new_w, new_h), Image.Resampling.LANCZOS)


def normalize_image(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    return im.convert("RGB")


def normalize_data_uri(data_uri: str, max_edge: int = 1600, quality: int = 85) -> str:
    """
    Decode an uploaded image, normalize orientation/mode, bound its size and
    re-encode it as a JPEG data URI suitable for an LLM image content part.
    """
    _, raw = split_data_uri(data_uri)
    try:
        with Image.open(io.BytesIO(raw)) as im:
            im = normalize_image(im)
            im = resize_to_max_edge(im, max_edge)
            buf = io.BytesIO()
            im.save(buf, "JPEG", quality=quality)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageProcessingError(f"Failed to process image: {e}")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/jpeg;base64,{encoded}"


def describe_image_ref(image_ref: str) -> str:
    """
    Short text form of an image reference for embedding in a prompt.
    URLs are kept verbatim; inline data URIs are summarized.
    """
    if is_data_uri(image_ref):
        mime = image_ref[5:].split(";", 1)[0] or "image"
        return f"[inline {mime} attached]"
    return image_ref
