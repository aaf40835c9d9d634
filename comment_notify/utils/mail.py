"""Email address helpers used to compare commenters with the site owner."""

import re
from typing import Optional

QQ_NUMBER_PATTERN = re.compile(r"^[1-9][0-9]{4,10}$")
QQ_MAIL_PATTERN = re.compile(r"^[1-9][0-9]{4,10}@qq\.com$", re.IGNORECASE)
QQ_SUFFIX_PATTERN = re.compile(r"@qq\.com$", re.IGNORECASE)


def normalize_mail(mail) -> str:
    """Trim and lower-case an email address."""
    return str(mail).strip().lower()


def equals_mail(mail1: Optional[str], mail2: Optional[str]) -> bool:
    """Compare two addresses after normalization.

    An empty or missing address never equals anything, including another
    empty address.
    """
    if not mail1 or not mail2:
        return False
    return normalize_mail(mail1) == normalize_mail(mail2)


def is_qq(mail: Optional[str]) -> bool:
    """Whether ``mail`` is a bare QQ number or a numeric @qq.com address."""
    if not mail:
        return False
    return bool(QQ_NUMBER_PATTERN.match(mail) or QQ_MAIL_PATTERN.match(mail))


def qq_number(mail: str) -> str:
    """Strip the @qq.com suffix, leaving the numeric QQ id."""
    return QQ_SUFFIX_PATTERN.sub("", mail.strip())
