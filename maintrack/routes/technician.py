from flask import Blueprint, render_template, redirect, url_for, request, flash, g, current_app
from flask_login import current_user
from maintrack.models import ROLE_TECHNICIAN
from maintrack.permissions import role_required, assignment_in_user_division

technician_bp = Blueprint('technician', __name__, url_prefix='/technician')


@technician_bp.route('/dashboard')
@role_required(ROLE_TECHNICIAN)
def dashboard():
    assignments = current_app.services.assignments.list_templates_for_division(current_user.division_id)
    return render_template('technician/dashboard.html', title='Technician Dashboard', assignments=assignments)


@technician_bp.route('/checklist/<int:assignment_id>')
@role_required(ROLE_TECHNICIAN)
@assignment_in_user_division('template')
def fill_checklist(assignment_id):
    return render_template('technician/checklist.html', title='Fill Checklist', assignment=g.assignment)


@technician_bp.route('/checklist/<int:assignment_id>/submit', methods=['POST'])
@role_required(ROLE_TECHNICIAN)
@assignment_in_user_division('template')
def submit_checklist(assignment_id):
    submission = current_app.services.assignments.submit_checklist(
        assignment_id,
        request.form,
        request.files,
        user_id=current_user.id
    )
    flash('Checklist submitted.', 'success')
    return redirect(url_for('technician.report_detail', assignment_id=submission.id))


@technician_bp.route('/report')
@role_required(ROLE_TECHNICIAN)
def report():
    submissions = current_app.services.assignments.list_completed_for_division(current_user.division_id)
    return render_template('technician/report.html', title='Checklist Reports', submissions=submissions)


@technician_bp.route('/report/<int:assignment_id>')
@role_required(ROLE_TECHNICIAN)
@assignment_in_user_division('submission')
def report_detail(assignment_id):
    return render_template('technician/report_detail.html', title='Checklist Report', submission=g.assignment)
