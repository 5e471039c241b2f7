from flask import Blueprint, render_template, redirect, url_for, request, flash, g, current_app
from flask_login import current_user
from maintrack.models import ROLE_SPV
from maintrack.permissions import role_required, asset_in_user_division

assets_bp = Blueprint('assets', __name__)


def asset_form_context(asset=None):
    taxonomy = current_app.services.taxonomy
    return dict(asset=asset,
                categories=taxonomy.list_categories(),
                floors=taxonomy.list_floors(),
                zones=taxonomy.list_zones())


def asset_attrs(form):
    return {
        'name': form.get('name'),
        'description': form.get('description'),
        'location': form.get('location'),
        'category_id': form.get('category'),
        'floor_id': form.get('floor'),
        'zone_id': form.get('zone'),
    }


@assets_bp.route('/assets', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
def assets():
    service = current_app.services.assets
    if request.method == 'POST':
        # Division always comes from the session, never from the form
        asset = service.create_asset(asset_attrs(request.form), current_user.division_id)
        flash(f'Asset {asset.name} created.', 'success')
        return redirect(url_for('assets.assets'))

    return render_template('assets/list.html',
                           title='Asset List',
                           assets=service.list_assets(current_user.division_id),
                           editable=True)


@assets_bp.route('/assets/new', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
def new_asset():
    if request.method == 'POST':
        return assets()
    return render_template('assets/form.html', title='Create Asset', **asset_form_context())


@assets_bp.route('/assets/<int:asset_id>/edit', methods=['GET', 'POST'])
@role_required(ROLE_SPV)
@asset_in_user_division
def edit_asset(asset_id):
    if request.method == 'POST':
        current_app.services.assets.update_asset(asset_id, asset_attrs(request.form))
        flash('Asset updated.', 'success')
        return redirect(url_for('assets.assets'))

    return render_template('assets/form.html', title='Edit Asset', **asset_form_context(g.asset))


@assets_bp.route('/assets/<int:asset_id>/delete', methods=['POST'])
@role_required(ROLE_SPV)
@asset_in_user_division
def delete_asset(asset_id):
    current_app.services.assets.delete_asset(asset_id)
    flash('Asset deleted.', 'success')
    return redirect(url_for('assets.assets'))
