import os
import time
from flask import jsonify, current_app
from werkzeug.utils import secure_filename
from maintrack.errors import ValidationFailure


def api_response(success=True, data=None, error=None, status=200):
    """Standardized JSON response for all API routes."""
    response = {
        'success': success,
        'data': data,
        'error': error
    }
    return jsonify(response), status


def as_list(value):
    """
    Normalizes a form value to a list.
    Single-element forms submit scalars, repeated fields submit lists.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def form_list(form, name):
    """Reads every value of a repeated form field, accepting both `name` and `name[]`."""
    values = form.getlist(name)
    if not values:
        values = form.getlist(f'{name}[]')
    return values


def parse_int(value, field='id'):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailure(f'Invalid {field}: {value!r}')


def parse_optional_int(value, field='id'):
    if value in (None, ''):
        return None
    return parse_int(value, field)


def save_upload(file_storage):
    """
    Stores an uploaded file under UPLOAD_FOLDER as `<epoch-millis>-<name>`.
    Returns the public path relative to the static folder, or None for empty inputs.
    """
    if not file_storage or not file_storage.filename:
        return None

    filename = secure_filename(file_storage.filename)
    if not filename:
        return None

    stored_name = f"{int(time.time() * 1000)}-{filename}"
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    file_storage.save(os.path.join(folder, stored_name))
    current_app.logger.info(f"Saved upload {stored_name}")
    return f"uploads/{stored_name}"


def delete_upload(path):
    """Removes a file stored by save_upload, given its `uploads/<name>` path."""
    stored = os.path.join(current_app.config['UPLOAD_FOLDER'], os.path.basename(path))
    if os.path.exists(stored):
        os.remove(stored)
        current_app.logger.info(f"Removed upload {os.path.basename(path)}")


def mask_db_url(url):
    if not url:
        return ''
    return url.replace(url.split('@')[0], '***') if '@' in url else url
