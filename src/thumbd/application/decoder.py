"""Decoding of queue message bodies into jobs."""

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional, Union, Any

from thumbd.domain.models import Job

INVALID_BASE64 = "invalid_base64"
INVALID_JSON = "invalid_json"
INVALID_JOB = "invalid_job"


@dataclass(frozen=True)
class DecodeFailure:
    """Why a message body could not be turned into a job."""

    kind: str  # INVALID_BASE64, INVALID_JSON or INVALID_JOB
    detail: str

    def __str__(self) -> str:
        return f"{self.kind}: {self.detail}"


@dataclass(frozen=True)
class DecodeResult:
    """Either a decoded job or the failure that prevented decoding."""

    job: Optional[Job] = None
    failure: Optional[DecodeFailure] = None
    base64_wrapped: bool = False

    @property
    def ok(self) -> bool:
        return self.job is not None


class _NotJson(Exception):
    pass


def _parse_json(text: Union[str, bytes]) -> Any:
    """Parse JSON, raising _NotJson only when the text is not JSON at all."""
    try:
        if isinstance(text, bytes):
            text = text.decode('utf-8')
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise _NotJson(str(e)) from e


def _to_job(data: Any, base64_wrapped: bool) -> DecodeResult:
    try:
        return DecodeResult(job=Job.from_dict(data), base64_wrapped=base64_wrapped)
    except (TypeError, ValueError) as e:
        return DecodeResult(failure=DecodeFailure(INVALID_JOB, str(e)), base64_wrapped=base64_wrapped)


def decode_message(body: Union[str, bytes]) -> DecodeResult:
    """
    Decode a message body into a Job.

    The body is first parsed as UTF-8 JSON. Only when that text is not JSON
    is it treated as base64: the decoded bytes are read one character per
    byte (latin-1) and parsed as JSON again. Valid JSON that does not
    describe a job is reported as-is, without the base64 fallback.

    Never raises; inspect `DecodeResult.ok` / `DecodeResult.failure`.
    """
    try:
        return _to_job(_parse_json(body), base64_wrapped=False)
    except _NotJson as direct_error:
        not_json = str(direct_error)

    try:
        raw = base64.b64decode(body, validate=False)
    except (binascii.Error, ValueError) as e:
        return DecodeResult(
            failure=DecodeFailure(INVALID_BASE64, f"{e} (direct parse: {not_json})"),
            base64_wrapped=True
        )

    try:
        data = _parse_json(raw.decode('latin-1'))
    except _NotJson as e:
        return DecodeResult(
            failure=DecodeFailure(INVALID_JSON, f"{e} (direct parse: {not_json})"),
            base64_wrapped=True
        )

    return _to_job(data, base64_wrapped=True)
