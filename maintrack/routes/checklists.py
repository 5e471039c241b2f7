from flask import Blueprint, render_template, redirect, url_for, request, flash, g, current_app
from flask_login import current_user
from maintrack.models import ROLE_SPV, INPUT_TYPES
from maintrack.permissions import role_required, checklist_owned_by_user
from maintrack.services.checklist_service import build_tasks
from maintrack.errors import ValidationFailure
from maintrack.utils import api_response, form_list

checklists_bp = Blueprint('checklists', __name__)


def _tasks_from_form(form):
    return build_tasks(
        descriptions=form_list(form, 'taskDescriptions'),
        input_types=form_list(form, 'taskInputTypes'),
        expected_units=form_list(form, 'taskExpectedUnits'),
        defaults=form_list(form, 'taskApprovalValues'),
        task_ids=form_list(form, 'taskIds')
    )


@checklists_bp.route('/spv/dashboard')
@role_required(ROLE_SPV)
def spv_dashboard():
    checklists = current_app.services.checklists.list_for_creator(current_user.id)
    return render_template('checklists/dashboard.html', title='SPV Dashboard', checklists=checklists)


@checklists_bp.route('/checklists', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
def checklists():
    service = current_app.services.checklists
    if request.method == 'POST':
        checklist = service.create_checklist(
            request.form.get('title'),
            _tasks_from_form(request.form),
            created_by_id=current_user.id
        )
        flash(f'Checklist "{checklist.title}" created.', 'success')
        return redirect(url_for('checklists.spv_dashboard'))

    return render_template('checklists/dashboard.html',
                           title='My Checklists',
                           checklists=service.list_for_creator(current_user.id))


@checklists_bp.route('/checklists/new')
@role_required(ROLE_SPV)
def new_checklist():
    return render_template('checklists/form.html',
                           title='Create Checklist',
                           checklist=None,
                           input_types=INPUT_TYPES)


@checklists_bp.route('/checklists/<int:checklist_id>/edit', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
@checklist_owned_by_user
def edit_checklist(checklist_id):
    if request.method == 'POST':
        current_app.services.checklists.edit_checklist(
            checklist_id,
            request.form.get('title'),
            _tasks_from_form(request.form)
        )
        flash('Checklist updated.', 'success')
        return redirect(url_for('checklists.spv_dashboard'))

    return render_template('checklists/form.html',
                           title='Edit Checklist',
                           checklist=g.checklist,
                           input_types=INPUT_TYPES)


@checklists_bp.route('/checklists/<int:checklist_id>/delete', methods=['POST'])
@role_required(ROLE_SPV)
@checklist_owned_by_user
def delete_checklist(checklist_id):
    current_app.services.checklists.delete_checklist(checklist_id)
    flash('Checklist deleted.', 'success')
    return redirect(url_for('checklists.spv_dashboard'))


@checklists_bp.route('/checklists/<int:checklist_id>/assign', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
@checklist_owned_by_user
def assign_checklist(checklist_id):
    services = current_app.services
    if request.method == 'POST':
        rows = services.assignments.assign_checklist_to_assets(
            checklist_id,
            form_list(request.form, 'assets'),
            current_user.division_id
        )
        flash(f'Checklist assigned to {len(rows)} assets.', 'success')
        return redirect(url_for('checklists.spv_dashboard'))

    assigned_ids = {a.asset_id for a in services.assignments.list_templates_for_checklist(checklist_id)}
    return render_template('checklists/assign.html',
                           title='Assign Checklist to Assets',
                           checklist=g.checklist,
                           assets=services.assets.list_assets(current_user.division_id),
                           assigned_ids=assigned_ids)


@checklists_bp.route('/checklists/sort', methods=['POST'])
@role_required(ROLE_SPV)
def sort_checklists():
    if request.is_json:
        # Either {"order": [ids]} or the bare id list
        payload = request.get_json(silent=True)
        ids = payload.get('order', []) if isinstance(payload, dict) else payload
        if not isinstance(ids, list):
            raise ValidationFailure('Expected a list of checklist ids')
    else:
        ids = form_list(request.form, 'order')

    updated = current_app.services.checklists.reorder(ids, current_user.id)
    return api_response(data={'updated': updated})


@checklists_bp.route('/api/checklists/<int:checklist_id>/tasks')
@role_required(ROLE_SPV)
@checklist_owned_by_user
def checklist_tasks(checklist_id):
    return api_response(data=g.checklist.tasks or [])
