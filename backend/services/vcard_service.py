"""vCard 3.0 serialization of member records."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import TYPE_CHECKING
from urllib.parse import quote

from backend.services.datetime_service import parse_date

if TYPE_CHECKING:
    from backend.models.organization import Organization
    from backend.models.user import User

logger = logging.getLogger(__name__)

VCARD_MEDIA_TYPE = "text/x-vcard"

_CRLF = "\r\n"
_MAX_LINE_OCTETS = 75
_UNSAFE_FILENAME_RE = re.compile(r'["\\\x00-\x1f\x7f/]')


def escape_value(value: str) -> str:
    """Escape a property value (RFC 6350 section 3.4)."""
    return (
        value.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace(";", "\\;")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\n")
    )


def fold_line(line: str) -> str:
    """Fold a content line into chunks of at most 75 octets.

    Continuation lines start with a single space. Multi-byte characters are
    never split.
    """
    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    chunks: list[str] = []
    current = ""
    current_octets = 0
    limit = _MAX_LINE_OCTETS
    for char in line:
        size = len(char.encode("utf-8"))
        if current_octets + size > limit:
            chunks.append(current)
            current = ""
            current_octets = 0
            # Continuation lines lose one octet to the leading space.
            limit = _MAX_LINE_OCTETS - 1
        current += char
        current_octets += size
    chunks.append(current)
    return (_CRLF + " ").join(chunks)


def _structured(*parts: str) -> str:
    return ";".join(escape_value(part) for part in parts)


def build_vcard(user: User, organization: Organization | None = None) -> str:
    """Serialize a member as a vCard 3.0 document with CRLF line endings."""
    lines = ["BEGIN:VCARD", "VERSION:3.0"]
    lines.append("N:" + _structured(user.last_name, user.first_name, "", "", ""))
    lines.append("FN:" + escape_value(user.full_name))
    lines.append("NICKNAME:" + escape_value(user.login_name))

    if user.email:
        lines.append("EMAIL;TYPE=INTERNET:" + escape_value(user.email))
    if user.phone:
        lines.append("TEL;TYPE=HOME,VOICE:" + escape_value(user.phone))
    if user.mobile:
        lines.append("TEL;TYPE=CELL,VOICE:" + escape_value(user.mobile))
    if user.street or user.city or user.postcode or user.country:
        lines.append(
            "ADR;TYPE=HOME:"
            + _structured("", "", user.street, user.city, "", user.postcode, user.country)
        )

    try:
        birthday = parse_date(user.birthday)
    except ValueError:
        logger.warning("Skipping unparseable birthday of user %d", user.id)
        birthday = None
    if birthday is not None:
        lines.append("BDAY:" + birthday.isoformat())
    if user.website:
        lines.append("URL:" + escape_value(user.website))
    if organization is not None:
        lines.append("ORG:" + escape_value(organization.longname))
    if user.note:
        lines.append("NOTE:" + escape_value(user.note))

    lines.append("END:VCARD")
    return _CRLF.join(fold_line(line) for line in lines) + _CRLF


def vcard_filename(user: User) -> str:
    """File name for the download, ``"<first> <last>.vcf"``."""
    name = user.full_name or user.login_name
    return _UNSAFE_FILENAME_RE.sub("", name).strip() + ".vcf"


def content_disposition(filename: str) -> str:
    """Build an attachment header, adding an RFC 5987 name for non-ASCII files."""
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    ascii_name = _UNSAFE_FILENAME_RE.sub("", ascii_name)
    header = f'attachment; filename="{ascii_name}"'
    if ascii_name != filename:
        header += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return header
