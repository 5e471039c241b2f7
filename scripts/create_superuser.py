"""
Creates (or resets the password of) a superuser account.

Usage: python scripts/create_superuser.py EMAIL PASSWORD [NAME]
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash
from maintrack.app import create_app
from maintrack.models import db, ROLE_SUPERUSER


def main(argv):
    if len(argv) < 3:
        print(__doc__.strip())
        return 1

    email, password = argv[1], argv[2]
    name = argv[3] if len(argv) > 3 else 'Superuser'

    app = create_app()
    with app.app_context():
        users = app.services.users
        existing = users.get_by_email(email)
        if existing:
            print(f"User {email} already exists. Updating...")
            existing.password_hash = generate_password_hash(password)
            existing.role = ROLE_SUPERUSER
            existing.division_id = None
            db.session.commit()
            print("Updated.")
        else:
            print(f"Creating new superuser: {email}")
            users.create_user(name, email, password, ROLE_SUPERUSER)
            print("Created.")
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
