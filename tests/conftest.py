from types import SimpleNamespace
import pytest
from maintrack.app import create_app
from maintrack.models import db, ROLE_SUPERUSER, ROLE_MANAGER, ROLE_SPV, ROLE_TECHNICIAN

PASSWORD = 'secret-pass'


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-key',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'SUPERUSER_EMAIL': None,
        'SEED_DEFAULTS': True,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    with app.app_context():
        yield app.services


@pytest.fixture
def world(app):
    """Two divisions with a supervisor and a technician each, plus a superuser and a manager."""
    with app.app_context():
        s = app.services
        d1 = s.taxonomy.create_division('Mechanical')
        d2 = s.taxonomy.create_division('Electrical')
        category = s.taxonomy.list_categories()[0]
        floor = s.taxonomy.list_floors()[0]
        zone = s.taxonomy.list_zones()[0]

        users = {
            'admin': s.users.create_user('Admin', 'admin@example.com', PASSWORD, ROLE_SUPERUSER),
            'manager': s.users.create_user('Manager', 'manager@example.com', PASSWORD, ROLE_MANAGER),
            'spv1': s.users.create_user('Spv One', 'spv1@example.com', PASSWORD, ROLE_SPV, d1.id),
            'spv2': s.users.create_user('Spv Two', 'spv2@example.com', PASSWORD, ROLE_SPV, d2.id),
            'tech1': s.users.create_user('Tech One', 'tech1@example.com', PASSWORD, ROLE_TECHNICIAN, d1.id),
            'tech2': s.users.create_user('Tech Two', 'tech2@example.com', PASSWORD, ROLE_TECHNICIAN, d2.id),
        }
        return SimpleNamespace(
            d1=d1.id,
            d2=d2.id,
            category=category.id,
            floor=floor.id,
            zone=zone.id,
            **{key: user.id for key, user in users.items()}
        )


def login(client, who):
    return client.post('/login', data={'email': f'{who}@example.com', 'password': PASSWORD})


@pytest.fixture
def login_as(client):
    def _login(who):
        client.get('/logout')
        response = login(client, who)
        assert response.status_code == 302
        return client
    return _login


def make_asset(app, division_id, category_id, name='AHU-01'):
    with app.app_context():
        asset = app.services.assets.create_asset({'name': name, 'category_id': category_id}, division_id)
        return asset.id


def make_checklist(app, user_id, title='Monthly AHU Check', descriptions=('Inspect belts', 'Supply air temp'),
                   input_types=('functional', 'measurement'), units=('', 'C')):
    from maintrack.services.checklist_service import build_tasks
    with app.app_context():
        tasks = build_tasks(list(descriptions), list(input_types), list(units))
        checklist = app.services.checklists.create_checklist(title, tasks, user_id)
        return checklist.id
