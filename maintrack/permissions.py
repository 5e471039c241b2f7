from functools import wraps
from flask import current_app, g, request
from flask_login import login_required, current_user
from maintrack.models import ROLE_TECHNICIAN
from maintrack.errors import Forbidden, NotFound

# Form fields a technician may write through routes guarded by technician_field_restriction
TECHNICIAN_FIELDS = frozenset({'functionalTest', 'measurement', 'visualCheck'})


def log_unauthorized(reason):
    current_app.logger.warning(
        f"Unauthorized attempt by user {getattr(current_user, 'id', None)} "
        f"(role={getattr(current_user, 'role', None)}) on {request.method} {request.path}: {reason}"
    )


def role_required(*roles):
    """Session must be authenticated and its role one of `roles`."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if current_user.role not in roles:
                log_unauthorized(f'role not in {roles}')
                raise Forbidden(f"Access denied: Only {' / '.join(roles)} allowed")
            return f(*args, **kwargs)
        return login_required(decorated)
    return decorator


def asset_in_user_division(f):
    """Loads the asset from the `asset_id` URL argument into g.asset, scoped to the user's division."""
    @wraps(f)
    def decorated(*args, **kwargs):
        asset = current_app.services.assets.get(kwargs.get('asset_id'))
        if not asset:
            raise NotFound('Asset not found')
        if asset.division_id != current_user.division_id:
            log_unauthorized(f'asset {asset.id} outside division')
            raise Forbidden('Access denied: Asset belongs to another division')
        g.asset = asset
        return f(*args, **kwargs)
    return login_required(decorated)


def checklist_owned_by_user(f):
    """Loads the checklist from the `checklist_id` URL argument into g.checklist; creator only."""
    @wraps(f)
    def decorated(*args, **kwargs):
        checklist = current_app.services.checklists.get(kwargs.get('checklist_id'))
        if not checklist:
            raise NotFound('Checklist not found')
        if checklist.created_by_id != current_user.id:
            log_unauthorized(f'checklist {checklist.id} owned by user {checklist.created_by_id}')
            raise Forbidden('Access denied: You can only manage your own checklists')
        g.checklist = checklist
        return f(*args, **kwargs)
    return login_required(decorated)


def assignment_in_user_division(kind):
    """
    Loads a template (kind='template') or submission (kind='submission') row from the
    `assignment_id` URL argument into g.assignment. The row's asset must be in the user's division.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            service = current_app.services.assignments
            if kind == 'template':
                assignment = service.get_template(kwargs.get('assignment_id'))
            else:
                assignment = service.get_submission(kwargs.get('assignment_id'))

            if assignment.asset.division_id != current_user.division_id:
                log_unauthorized(f'assignment {assignment.id} outside division')
                raise Forbidden('Access denied: Checklist belongs to another division')
            g.assignment = assignment
            return f(*args, **kwargs)
        return login_required(decorated)
    return decorator


def technician_field_restriction(allowed=TECHNICIAN_FIELDS):
    """Technicians may only submit the allow-listed form fields; other roles pass through."""
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if current_user.role == ROLE_TECHNICIAN:
                submitted = set(request.form.keys()) | set(request.files.keys())
                extra = submitted - set(allowed)
                if extra:
                    log_unauthorized(f"fields {sorted(extra)} not allowed for technicians")
                    raise Forbidden('Access denied: Technicians cannot modify these fields')
            return f(*args, **kwargs)
        return login_required(decorated)
    return decorator
