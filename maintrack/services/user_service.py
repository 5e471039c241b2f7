import logging
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash
from maintrack.models import User, Division, ROLES, DIVISION_ROLES, ROLE_SUPERUSER, get_now
from maintrack.errors import NotFound, InvalidCredentials, DuplicateEmail, ValidationFailure

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db):
        self.db = db

    def get(self, user_id):
        return self.db.session.get(User, user_id)

    def get_by_email(self, email):
        return User.query.filter_by(email=(email or '').strip().lower()).first()

    def list_users(self):
        return User.query.order_by(User.role, User.name).all()

    def authenticate(self, email, password):
        """
        Returns the user for valid credentials.
        Raises NotFound for an unknown email and InvalidCredentials for a bad password.
        """
        user = self.get_by_email(email)
        if not user:
            raise NotFound('User not found')
        if not password or not check_password_hash(user.password_hash, password):
            raise InvalidCredentials('Incorrect password')

        user.last_login = get_now()
        self.db.session.commit()
        return user

    def create_user(self, name, email, password, role, division_id=None):
        """
        Creates a user with a salted password hash.
        Superusers and managers never carry a division; spv and technician users require one.
        """
        name = (name or '').strip()
        email = (email or '').strip().lower()

        if not name or not email or not password:
            raise ValidationFailure('Name, email and password are required')
        if role not in ROLES:
            raise ValidationFailure(f'Unknown role: {role}')

        if role in DIVISION_ROLES:
            if division_id is None:
                raise ValidationFailure(f'A division is required for role {role}')
            if not self.db.session.get(Division, division_id):
                raise ValidationFailure(f'Unknown division: {division_id}')
        else:
            division_id = None

        if self.get_by_email(email):
            raise DuplicateEmail(f'Email already registered: {email}')

        user = User(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            division_id=division_id
        )
        self.db.session.add(user)
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            raise DuplicateEmail(f'Email already registered: {email}')

        logger.info(f"Created user {user.id} ({user.email}) with role {user.role}")
        return user

    def ensure_superuser(self, email, password, name='Superuser'):
        """Creates the bootstrap superuser unless that email is already registered."""
        existing = self.get_by_email(email)
        if existing:
            return existing
        return self.create_user(name, email, password, ROLE_SUPERUSER)
