"""
API Utilities Module

FLOW OVERVIEW
- get_json_body(required=True)
  • Parse the JSON object body or raise ValidationError.
- require_note(data, field, message)
  • Trimmed non-empty note from a body or ValidationError.
- get_or_404(model, id, message)
  • Primary-key lookup raising NotFound.
- read_upload_text()
  • CSV text from a multipart `file` field or the raw request body.
"""

import logging
from typing import Any, Dict

from flask import request

from ..models import db
from .error_handlers import ValidationError, NotFound
from .validators import sanitize_input

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 1024 * 1024


def get_json_body(required: bool = True) -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        if required:
            raise ValidationError('Invalid request format. JSON payload required.')
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require_note(data: Dict[str, Any], field: str = 'note',
                 message: str = 'Please add a note describing the issue') -> str:
    note = sanitize_input(data.get(field) or '', 2000)
    if not note:
        raise ValidationError(message, details={field: message})
    return note


def optional_note(data: Dict[str, Any], field: str = 'note'):
    return sanitize_input(data.get(field) or '', 2000) or None


def get_or_404(model, object_id, message='Not found'):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFound(message)
    return obj


def read_upload_text() -> str:
    """CSV text from multipart `file` or the raw body"""
    upload = request.files.get('file')
    if upload is not None:
        raw = upload.read(MAX_UPLOAD_BYTES + 1)
    else:
        raw = request.get_data(cache=False)
    if len(raw) > MAX_UPLOAD_BYTES:
        raise ValidationError('CSV file too large (max 1MB)')
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        logger.info("Rejected CSV upload that is not UTF-8")
        raise ValidationError('CSV file must be UTF-8 text')
