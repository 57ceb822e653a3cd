"""
Shift QR tokens.

Each shift gets a check-in and a check-out token that is valid for the event day
only (until 23:59:59 UTC of the event date). The token is printed as a QR code.
"""

from __future__ import annotations

import io
import logging
import secrets
import uuid
from datetime import date, datetime

import qrcode
from PIL import Image

from haas.core.time import end_of_day_utc
from haas.domain.models import PunchPurpose, QrToken

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """UUID4 hex followed by the decimal digits of 8 random bytes."""
    return uuid.uuid4().hex + "".join(str(b) for b in secrets.token_bytes(8))


def qr_expiry(event_date: date) -> datetime:
    return end_of_day_utc(event_date)


def issue_qr_token(shift_id: str, purpose: PunchPurpose, event_date: date) -> QrToken:
    """Issue a new token for `shift_id` valid through the end of `event_date`."""
    token = QrToken(
        shift_id=shift_id,
        token=generate_token(),
        purpose=purpose,
        issued_for_date=event_date,
        expires_at=qr_expiry(event_date),
    )
    logger.info("Issued %s QR token for shift=%s date=%s", purpose, shift_id, event_date.isoformat())
    return token


def is_qr_token_valid(token: QrToken, *, purpose: PunchPurpose, now: datetime) -> bool:
    """A token is valid for its own purpose up to and including `expires_at`."""
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return token.purpose == purpose and now <= token.expires_at


def render_qr_png(token: str, *, width: int = 256, border: int = 1) -> bytes:
    """Render `token` as a square black-on-white PNG of `width` pixels."""
    qr = qrcode.QRCode(border=border, error_correction=qrcode.constants.ERROR_CORRECT_M)
    qr.add_data(token)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    img = img.resize((width, width), Image.Resampling.NEAREST)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
