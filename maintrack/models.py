from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin

def get_now():
    return datetime.now(timezone.utc).replace(tzinfo=None)

db = SQLAlchemy()

# Roles (plain strings, portable across SQLite/Postgres)
ROLE_SUPERUSER = 'superuser'
ROLE_MANAGER = 'manager'
ROLE_SPV = 'spv'
ROLE_TECHNICIAN = 'technician'

ROLES = (ROLE_SUPERUSER, ROLE_MANAGER, ROLE_SPV, ROLE_TECHNICIAN)
DIVISION_ROLES = (ROLE_SPV, ROLE_TECHNICIAN)

# Task input types
INPUT_VISUAL = 'visual'
INPUT_MEASUREMENT = 'measurement'
INPUT_FUNCTIONAL = 'functional'

INPUT_TYPES = (INPUT_VISUAL, INPUT_MEASUREMENT, INPUT_FUNCTIONAL)


class Division(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=get_now)

    users = db.relationship('User', backref='division', lazy=True)
    assets = db.relationship('Asset', backref='division', lazy=True)

    @property
    def spvs(self):
        return [u for u in self.users if u.role == ROLE_SPV]


class User(UserMixin, db.Model):
    __table_args__ = (
        db.CheckConstraint(
            "role IN ('spv', 'technician') OR division_id IS NULL",
            name='ck_user_division_scope'
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    division_id = db.Column(db.Integer, db.ForeignKey('division.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=get_now)
    last_login = db.Column(db.DateTime, nullable=True)

    checklists = db.relationship('Checklist', backref='creator', lazy=True)


class Floor(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)

    zones = db.relationship('Zone', backref='floor', lazy=True)


class Zone(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    floor_id = db.Column(db.Integer, db.ForeignKey('floor.id'), nullable=True)


class AssetCategory(db.Model):
    __tablename__ = 'asset_category'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)


class Asset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.String(200), nullable=True) # Free text
    category_id = db.Column(db.Integer, db.ForeignKey('asset_category.id'), nullable=False)
    floor_id = db.Column(db.Integer, db.ForeignKey('floor.id'), nullable=True)
    zone_id = db.Column(db.Integer, db.ForeignKey('zone.id'), nullable=True)
    division_id = db.Column(db.Integer, db.ForeignKey('division.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=get_now)

    category = db.relationship('AssetCategory')
    floor = db.relationship('Floor')
    zone = db.relationship('Zone')
    assignments = db.relationship('ChecklistAssignment', backref='asset', lazy=True,
                                  cascade='all, delete')


class Checklist(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    # Ordered list of tasks:
    # [{"id", "description", "inputType", "expectedUnit", "actualValue",
    #   "note", "materialUsed", "status", "photos": []}]
    tasks = db.Column(db.JSON, nullable=False, default=list)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=get_now)
    order = db.Column(db.Integer, nullable=False, default=0)

    assignments = db.relationship('ChecklistAssignment', backref='checklist', lazy=True,
                                  cascade='all, delete')

    @property
    def template_assignments(self):
        return [a for a in self.assignments if a.is_template]


class ChecklistAssignment(db.Model):
    __tablename__ = 'checklist_assignment'

    id = db.Column(db.Integer, primary_key=True)
    checklist_id = db.Column(db.Integer, db.ForeignKey('checklist.id'), nullable=False, index=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id'), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=get_now)
    is_template = db.Column(db.Boolean, nullable=False, default=True)

    # Submission rows only (is_template=False)
    responses = db.Column(db.JSON, nullable=True) # {task_id: value}
    notes = db.Column(db.JSON, nullable=True) # {task_id: note}
    materials_used = db.Column(db.JSON, nullable=True) # {task_id: material}
    task_snapshot = db.Column(db.JSON, nullable=True) # Checklist.tasks at submit time
    completed_at = db.Column(db.DateTime, nullable=True)
    submitted_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)

    submitted_by = db.relationship('User', backref='submissions')

    @property
    def tasks(self):
        """Tasks to display: the snapshot for submissions, the live template otherwise."""
        if self.task_snapshot is not None:
            return self.task_snapshot
        return self.checklist.tasks or []
