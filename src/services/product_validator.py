"""Validation of product create/update payloads.

Validation is a pure function of its input: it never touches the database
or the blob store. Failures are collected per field and raised together as
a ProductValidationError carrying localized messages.
"""

import math
import re
from typing import Any, Iterable, Mapping, Optional

from ..models import ImageUpload, ProductFields

TITLE_MAX_LENGTH = 20
DESCRIPTION_MAX_LENGTH = 255
DEFAULT_MAX_IMAGE_KB = 2048
DEFAULT_ALLOWED_IMAGE_TYPES = ("jpeg", "png", "jpg", "gif", "svg")

# MIME types accepted as "an image" at all, before the allowed-type check
_IMAGE_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/bmp",
    "image/svg+xml",
    "image/webp",
}

_EXTENSION_MIME_TYPES = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "webp": "image/webp",
}

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

MESSAGES = {
    "title.required": "El título es obligatorio.",
    "title.string": "El título debe ser un texto.",
    "title.max": f"El título no debe exceder los {TITLE_MAX_LENGTH} caracteres.",
    "description.required": "La descripción es obligatoria.",
    "description.string": "La descripción debe ser un texto.",
    "description.max": f"La descripción no debe exceder los {DESCRIPTION_MAX_LENGTH} caracteres.",
    "price.required": "El precio es obligatorio.",
    "price.numeric": "El precio debe ser un número.",
    "image.required": "La imagen es obligatoria.",
    "image.image": "El archivo debe ser una imagen.",
    "image.mimes": "La imagen debe tener uno de los siguientes formatos: {formats}.",
    "image.max": "La imagen no debe exceder los {limit}.",
}


class ProductValidationError(Exception):
    """Raised when a product payload fails validation.

    Attributes:
        errors: Mapping of field name to the list of messages for that field.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(f"Invalid product data: {', '.join(sorted(errors))}")


def detect_image_type(data: bytes) -> Optional[str]:
    """Detect the MIME type of image content from its leading bytes.

    Returns None when the content is not a recognised image format.
    """
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith(b"BM"):
        return "image/bmp"

    head = data[:1024].decode("utf-8", errors="ignore").lstrip("\ufeff \t\r\n").lower()
    if head.startswith(("<?xml", "<svg", "<!--", "<!doctype svg")) and "<svg" in head:
        return "image/svg+xml"
    return None


def _format_kb(kilobytes: int) -> str:
    if kilobytes % 1024 == 0:
        return f"{kilobytes // 1024}MB"
    return f"{kilobytes}KB"


def _normalize_text(value: Any) -> Any:
    # Surrounding whitespace is trimmed and blank strings count as missing
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _parse_price(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and _NUMERIC_RE.match(value):
        number = float(value)
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class ProductValidator:
    """Validates raw product payloads against the listing rules."""

    def __init__(
        self,
        max_image_kb: int = DEFAULT_MAX_IMAGE_KB,
        allowed_image_types: Iterable[str] = DEFAULT_ALLOWED_IMAGE_TYPES,
    ):
        self._max_image_kb = max_image_kb
        self._allowed_image_types = tuple(allowed_image_types)
        self._allowed_mime_types = {
            _EXTENSION_MIME_TYPES[ext]
            for ext in self._allowed_image_types
            if ext in _EXTENSION_MIME_TYPES
        }

    @property
    def max_image_bytes(self) -> int:
        """Largest accepted image size in bytes."""
        return self._max_image_kb * 1024

    def validate(
        self,
        payload: Mapping[str, Any],
        image: Optional[ImageUpload],
        *,
        require_image: bool = True,
    ) -> ProductFields:
        """Validate a create/update payload.

        Args:
            payload: Raw form values for ``title``, ``description`` and ``price``.
            image: The uploaded image, or None when no file was sent.
            require_image: Whether a missing image is an error. When False a
                missing image validates and ``ProductFields.image`` is None.

        Returns:
            Normalized ProductFields.

        Raises:
            ProductValidationError: With every failing field and its messages.
        """
        errors: dict[str, list[str]] = {}

        title = self._validate_text(payload.get("title"), "title", TITLE_MAX_LENGTH, errors)
        description = self._validate_text(
            payload.get("description"), "description", DESCRIPTION_MAX_LENGTH, errors
        )

        price = None
        raw_price = _normalize_text(payload.get("price"))
        if raw_price is None:
            errors["price"] = [MESSAGES["price.required"]]
        else:
            price = _parse_price(raw_price)
            if price is None:
                errors["price"] = [MESSAGES["price.numeric"]]

        image_type = None
        if image is None or image.size == 0:
            image = None
            if require_image:
                errors["image"] = [MESSAGES["image.required"]]
        else:
            image_type, image_errors = self._validate_image(image)
            if image_errors:
                errors["image"] = image_errors

        if errors:
            raise ProductValidationError(errors)

        return ProductFields(
            title=title,
            description=description,
            price=price,
            image=image,
            image_type=image_type,
        )

    def _validate_text(
        self,
        value: Any,
        field: str,
        max_length: int,
        errors: dict[str, list[str]],
    ) -> Optional[str]:
        value = _normalize_text(value)
        if value is None:
            errors[field] = [MESSAGES[f"{field}.required"]]
            return None
        if not isinstance(value, str):
            errors[field] = [MESSAGES[f"{field}.string"]]
            return None
        if len(value) > max_length:
            errors[field] = [MESSAGES[f"{field}.max"]]
            return None
        return value

    def _validate_image(self, image: ImageUpload) -> tuple[Optional[str], list[str]]:
        messages = []
        image_type = detect_image_type(image.data)

        if image_type not in _IMAGE_MIME_TYPES:
            messages.append(MESSAGES["image.image"])
        if image_type not in self._allowed_mime_types:
            messages.append(
                MESSAGES["image.mimes"].format(formats=", ".join(self._allowed_image_types))
            )
        if image.size > self.max_image_bytes:
            messages.append(MESSAGES["image.max"].format(limit=_format_kb(self._max_image_kb)))

        return image_type, messages
