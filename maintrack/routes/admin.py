from flask import Blueprint, render_template, redirect, url_for, request, flash, current_app
from flask_login import current_user
from maintrack.models import ROLES, ROLE_SUPERUSER
from maintrack.permissions import role_required
from maintrack.utils import parse_optional_int
from maintrack.routes.assets import asset_attrs, asset_form_context

admin_bp = Blueprint('admin', __name__)

superuser_required = role_required(ROLE_SUPERUSER)


@admin_bp.route('/superuser/dashboard')
@superuser_required
def dashboard():
    services = current_app.services
    return render_template('admin/dashboard.html',
                           title='Superuser Dashboard',
                           users=services.users.list_users(),
                           divisions=services.taxonomy.list_divisions(),
                           assets=services.assets.list_assets())


# --- Users ---
@admin_bp.route('/admin/users', methods=['GET', 'POST'])
@superuser_required
def users():
    services = current_app.services
    if request.method == 'POST':
        user = services.users.create_user(
            name=request.form.get('name'),
            email=request.form.get('email'),
            password=request.form.get('password'),
            role=request.form.get('role'),
            division_id=parse_optional_int(request.form.get('division'), 'division')
        )
        current_app.logger.info(f"Superuser {current_user.id} created user {user.id}")
        flash(f'User {user.email} created.', 'success')
        return redirect(url_for('admin.new_user'))

    return render_template('admin/users.html', title='Users', users=services.users.list_users())


@admin_bp.route('/admin/users/new')
@superuser_required
def new_user():
    return render_template('admin/user_form.html',
                           title='Create New User',
                           roles=ROLES,
                           divisions=current_app.services.taxonomy.list_divisions())


# --- Divisions ---
@admin_bp.route('/admin/divisions', methods=['GET', 'POST'])
@superuser_required
def divisions():
    taxonomy = current_app.services.taxonomy
    if request.method == 'POST':
        division = taxonomy.create_division(request.form.get('name'))
        flash(f'Division {division.name} created.', 'success')
        return redirect(url_for('admin.new_division'))

    return render_template('admin/reference_list.html',
                           title='Divisions',
                           items=taxonomy.list_divisions(),
                           new_url=url_for('admin.new_division'))


@admin_bp.route('/admin/divisions/new')
@superuser_required
def new_division():
    return render_template('admin/reference_form.html',
                           title='Create Division',
                           action=url_for('admin.divisions'))


# --- Floors ---
@admin_bp.route('/admin/floors', methods=['GET', 'POST'])
@superuser_required
def floors():
    taxonomy = current_app.services.taxonomy
    if request.method == 'POST':
        floor = taxonomy.create_floor(request.form.get('name'))
        flash(f'Floor {floor.name} created.', 'success')
        return redirect(url_for('admin.floors'))

    return render_template('admin/reference_list.html',
                           title='Floor List',
                           items=taxonomy.list_floors(),
                           new_url=url_for('admin.new_floor'))


@admin_bp.route('/admin/floors/new')
@superuser_required
def new_floor():
    return render_template('admin/reference_form.html',
                           title='Create New Floor',
                           action=url_for('admin.floors'))


# --- Zones ---
@admin_bp.route('/admin/zones', methods=['GET', 'POST'])
@superuser_required
def zones():
    taxonomy = current_app.services.taxonomy
    if request.method == 'POST':
        zone = taxonomy.create_zone(
            request.form.get('name'),
            floor_id=parse_optional_int(request.form.get('floor'), 'floor')
        )
        flash(f'Zone {zone.name} created.', 'success')
        return redirect(url_for('admin.zones'))

    return render_template('admin/reference_list.html',
                           title='Zone List',
                           items=taxonomy.list_zones(),
                           new_url=url_for('admin.new_zone'))


@admin_bp.route('/admin/zones/new')
@superuser_required
def new_zone():
    return render_template('admin/reference_form.html',
                           title='Create New Zone',
                           action=url_for('admin.zones'),
                           floors=current_app.services.taxonomy.list_floors())


# --- Asset Categories ---
@admin_bp.route('/admin/categories', methods=['GET', 'POST'])
@superuser_required
def categories():
    taxonomy = current_app.services.taxonomy
    if request.method == 'POST':
        category = taxonomy.create_category(request.form.get('name'))
        flash(f'Category {category.name} created.', 'success')
        return redirect(url_for('admin.categories'))

    return render_template('admin/reference_list.html',
                           title='Asset Categories',
                           items=taxonomy.list_categories(),
                           new_url=url_for('admin.new_category'))


@admin_bp.route('/admin/categories/new')
@superuser_required
def new_category():
    return render_template('admin/reference_form.html',
                           title='Create Asset Category',
                           action=url_for('admin.categories'))


# --- Assets (unscoped overview) ---
@admin_bp.route('/admin/assets', methods=['GET', 'POST'])
@superuser_required
def assets():
    services = current_app.services
    if request.method == 'POST':
        # Superusers place the asset in any division, chosen explicitly
        asset = services.assets.create_asset(
            asset_attrs(request.form),
            parse_optional_int(request.form.get('division'), 'division')
        )
        current_app.logger.info(f"Superuser {current_user.id} created asset {asset.id} in division {asset.division_id}")
        flash(f'Asset {asset.name} created.', 'success')
        return redirect(url_for('admin.new_asset'))

    division_id = parse_optional_int(request.args.get('division'), 'division')
    return render_template('admin/assets.html',
                           title='All Assets',
                           assets=services.assets.list_assets(division_id),
                           divisions=services.taxonomy.list_divisions(),
                           selected_division=division_id)


@admin_bp.route('/admin/assets/new')
@superuser_required
def new_asset():
    return render_template('assets/form.html',
                           title='Create Asset',
                           action=url_for('admin.assets'),
                           divisions=current_app.services.taxonomy.list_divisions(),
                           **asset_form_context())
