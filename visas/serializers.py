from .schema import FIELD_NAMES


def _json_value(value):
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if isinstance(value, (bool, int, float, str, list, dict)):
        return value
    return str(value)


def application_values(application):
    """Form field values of an application, as stored (dates stay dates)."""
    return {name: getattr(application, name) for name in FIELD_NAMES}


def serialize_application(application):
    data = {
        'id': str(application.id),
        'user_id': application.user_id,
    }
    for name in FIELD_NAMES:
        data[name] = _json_value(getattr(application, name))

    data.update({
        'status': application.status,
        'is_locked': application.is_locked,
        'is_paid': application.is_paid,
        'last_autosave_at': _json_value(application.last_autosave_at),
        'submitted_at': _json_value(application.submitted_at),
        'created_at': _json_value(application.created_at),
        'updated_at': _json_value(application.updated_at),
    })
    return data


def serialize_document(document, url=None):
    return {
        'id': str(document.id),
        'application_id': str(document.application_id),
        'document_type': document.document_type,
        'file_name': document.file_name,
        'mime_type': document.mime_type,
        'file_size': document.file_size,
        'uploaded_at': _json_value(document.uploaded_at),
        'url': url,
    }
