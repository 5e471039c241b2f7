import pytest
from maintrack.models import db, User, Floor, Zone, AssetCategory, Asset, ROLE_SPV, ROLE_MANAGER
from maintrack.errors import ValidationFailure, DuplicateEmail
from conftest import make_asset


def test_manager_and_superuser_never_keep_a_division(app, client, world, login_as):
    login_as('admin')
    for role in ('manager', 'superuser'):
        response = client.post('/admin/users', data={
            'name': f'New {role}', 'email': f'new-{role}@example.com',
            'password': 'pw', 'role': role, 'division': str(world.d1)
        })
        assert response.status_code == 302

    with app.app_context():
        for user in User.query.filter(User.role.in_(('manager', 'superuser'))).all():
            assert user.division_id is None


def test_create_spv_requires_division(services, world):
    with pytest.raises(ValidationFailure):
        services.users.create_user('S', 's@example.com', 'pw', ROLE_SPV)


def test_create_user_rejects_unknown_role(services, world):
    with pytest.raises(ValidationFailure):
        services.users.create_user('X', 'x@example.com', 'pw', 'janitor')


def test_duplicate_email_is_rejected(app, client, world, login_as):
    login_as('admin')
    response = client.post('/admin/users', data={
        'name': 'Dup', 'email': 'SPV1@example.com', 'password': 'pw', 'role': 'manager'
    })
    assert response.status_code == 409

    with app.app_context():
        with pytest.raises(DuplicateEmail):
            app.services.users.create_user('Dup', 'spv1@example.com', 'pw', 'manager')


def test_password_is_hashed(app, world):
    with app.app_context():
        user = db.session.get(User, world.spv1)
        assert user.password_hash != 'secret-pass'
        assert user.password_hash.count('$') >= 2


def test_division_constraint_enforced_by_database(app, world):
    with app.app_context():
        user = db.session.get(User, world.manager)
        user.division_id = world.d1
        with pytest.raises(Exception):
            db.session.commit()
        db.session.rollback()


def test_non_superuser_is_forbidden(client, world, login_as):
    login_as('tech1')
    response = client.get('/admin/users')
    assert response.status_code == 403
    assert b'Access denied' in response.data

    login_as('spv1')
    assert client.post('/admin/divisions', data={'name': 'Rogue'}).status_code == 403


def test_create_reference_records(app, client, world, login_as):
    login_as('admin')
    assert client.post('/admin/divisions', data={'name': 'Civil'}).status_code == 302
    assert client.post('/admin/floors', data={'name': 'Floor 9'}).status_code == 302
    with app.app_context():
        floor_id = Floor.query.filter_by(name='Floor 9').one().id
    assert client.post('/admin/zones', data={'name': 'Atrium', 'floor': str(floor_id)}).status_code == 302
    assert client.post('/admin/categories', data={'name': 'Cooling Tower'}).status_code == 302

    with app.app_context():
        assert Zone.query.filter_by(name='Atrium').one().floor_id == floor_id
        assert AssetCategory.query.filter_by(name='Cooling Tower').count() == 1
        assert [d.name for d in app.services.taxonomy.list_divisions()] == ['Civil', 'Electrical', 'Mechanical']

    response = client.get('/admin/zones')
    assert b'Atrium (Floor 9)' in response.data


def test_duplicate_floor_is_conflict(client, world, login_as):
    login_as('admin')
    assert client.post('/admin/floors', data={'name': 'Roof'}).status_code == 409


def test_blank_division_name_is_invalid(client, world, login_as):
    login_as('admin')
    assert client.post('/admin/divisions', data={'name': '  '}).status_code == 400


def test_superuser_asset_overview_is_unscoped(app, client, world, login_as):
    make_asset(app, world.d1, world.category, 'Chiller A')
    make_asset(app, world.d2, world.category, 'Switchboard B')

    login_as('admin')
    body = client.get('/admin/assets').get_data(as_text=True)
    assert 'Chiller A' in body and 'Switchboard B' in body

    body = client.get(f'/admin/assets?division={world.d2}').get_data(as_text=True)
    assert 'Chiller A' not in body and 'Switchboard B' in body


def test_division_spvs(app, world):
    with app.app_context():
        division = app.services.taxonomy.get_division(world.d1)
        assert [u.id for u in division.spvs] == [world.spv1]


def test_admin_pages_render(client, world, login_as):
    login_as('admin')
    for path in ('/superuser/dashboard', '/admin/users', '/admin/users/new', '/admin/divisions/new',
                 '/admin/floors', '/admin/floors/new', '/admin/zones/new', '/admin/categories',
                 '/admin/categories/new', '/admin/divisions'):
        assert client.get(path).status_code == 200, path


def test_superuser_creates_asset_in_chosen_division(app, client, world, login_as):
    login_as('admin')
    body = client.get('/admin/assets/new').get_data(as_text=True)
    assert 'name="division"' in body
    assert 'Electrical' in body and 'Mechanical' in body

    response = client.post('/admin/assets', data={
        'name': 'Main Switchgear',
        'category': str(world.category),
        'floor': str(world.floor),
        'division': str(world.d2),
    })
    assert response.status_code == 302
    assert response.headers['Location'].endswith('/admin/assets/new')

    with app.app_context():
        asset = Asset.query.filter_by(name='Main Switchgear').one()
        assert asset.division_id == world.d2


def test_superuser_asset_requires_division(client, world, login_as):
    login_as('admin')
    response = client.post('/admin/assets', data={'name': 'Floating', 'category': str(world.category)})
    assert response.status_code == 400


def test_supervisor_cannot_use_admin_asset_creation(client, world, login_as):
    login_as('spv1')
    assert client.get('/admin/assets/new').status_code == 403
    assert client.post('/admin/assets', data={'name': 'X', 'category': str(world.category),
                                              'division': str(world.d1)}).status_code == 403


def test_duplicate_email_caught_at_insert(services, world, monkeypatch):
    # The pre-insert lookup misses, so the unique index has to catch it
    monkeypatch.setattr(services.users, 'get_by_email', lambda email: None)
    with pytest.raises(DuplicateEmail):
        services.users.create_user('Again', 'spv1@example.com', 'pw', ROLE_MANAGER)

    assert User.query.filter_by(email='spv1@example.com').count() == 1
