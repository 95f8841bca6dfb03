"""
Credential-pattern router.

The backend is chosen purely from the shape of the bearer credential. Rules
are evaluated in a fixed order and the first match wins.
"""

import re
from typing import Optional

from .audit_logger import AuditLogger
from .models import Provider

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_GITEE_RE = re.compile(r"[A-Za-z0-9]{30,60}")

KEY_PREFIX_LENGTH = 4


def _match(credential: str) -> Provider:
    if credential.startswith("hf_"):
        return Provider.HUGGINGFACE
    if credential.startswith("ms-"):
        return Provider.MODELSCOPE
    if _UUID_RE.fullmatch(credential):
        return Provider.VOLCENGINE
    if _GITEE_RE.fullmatch(credential):
        return Provider.GITEE
    return Provider.UNKNOWN


def classify(credential: Optional[str], audit: Optional[AuditLogger] = None) -> Provider:
    """
    Classify a credential into a Provider.

    Never raises; Provider.UNKNOWN is a valid result that the entry point
    turns into an authentication failure.
    """
    if not credential:
        return Provider.UNKNOWN

    provider = _match(credential)
    (audit or AuditLogger()).log_provider_routing(
        provider=provider.value,
        key_prefix=credential[:KEY_PREFIX_LENGTH],
    )
    return provider
