import logging
from sqlalchemy.exc import IntegrityError
from maintrack.models import Division, Floor, Zone, AssetCategory
from maintrack.errors import ValidationFailure, DuplicateKey

logger = logging.getLogger(__name__)

DEFAULT_FLOORS = [
    'Basement 2', 'Basement 1', 'Ground Floor', 'Mezzanine',
    'Floor 1', 'Floor 2', 'Floor 3', 'Roof'
]

DEFAULT_ZONES = [
    'North Wing', 'South Wing', 'East Wing', 'West Wing',
    'Lobby', 'Plant Room', 'Parking', 'Loading Dock'
]

DEFAULT_CATEGORIES = [
    'HVAC', 'Electrical', 'Plumbing', 'Fire Protection',
    'Elevator & Escalator', 'Generator', 'Lighting', 'Building Automation'
]


class TaxonomyService:
    """Reference data: divisions, floors, zones and asset categories."""

    def __init__(self, db):
        self.db = db

    # --- Divisions ---
    def list_divisions(self):
        return Division.query.order_by(Division.name).all()

    def get_division(self, division_id):
        return self.db.session.get(Division, division_id)

    def create_division(self, name):
        name = (name or '').strip()
        if not name:
            raise ValidationFailure('Division name is required')
        division = Division(name=name)
        self.db.session.add(division)
        self.db.session.commit()
        logger.info(f"Created division {division.id} ({division.name})")
        return division

    # --- Floors / Zones / Categories ---
    def list_floors(self):
        return Floor.query.order_by(Floor.name).all()

    def list_zones(self):
        return Zone.query.order_by(Zone.name).all()

    def list_categories(self):
        return AssetCategory.query.order_by(AssetCategory.name).all()

    def create_floor(self, name):
        return self._create_named(Floor, name)

    def create_zone(self, name, floor_id=None):
        if floor_id is not None and not self.db.session.get(Floor, floor_id):
            raise ValidationFailure(f'Unknown floor: {floor_id}')
        return self._create_named(Zone, name, floor_id=floor_id)

    def create_category(self, name):
        return self._create_named(AssetCategory, name)

    def _find_by_name(self, model, name):
        return model.query.filter_by(name=name).first()

    def _create_named(self, model, name, **extra):
        name = (name or '').strip()
        label = model.__name__
        if not name:
            raise ValidationFailure(f'{label} name is required')
        if self._find_by_name(model, name):
            raise DuplicateKey(f'{label} "{name}" already exists')

        record = model(name=name, **extra)
        self.db.session.add(record)
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            raise DuplicateKey(f'{label} "{name}" already exists')
        logger.info(f"Created {label} {record.id} ({record.name})")
        return record

    # --- Seeding ---
    def ensure_seeded(self, floors=None, zones=None, categories=None):
        """
        Upserts the default floors, zones and categories by name.
        Safe to run repeatedly; a concurrent insert of the same name is logged and skipped.
        Returns the number of rows created.
        """
        created = 0
        for model, names in (
            (Floor, DEFAULT_FLOORS if floors is None else floors),
            (Zone, DEFAULT_ZONES if zones is None else zones),
            (AssetCategory, DEFAULT_CATEGORIES if categories is None else categories),
        ):
            for name in names:
                if self._find_by_name(model, name):
                    continue
                self.db.session.add(model(name=name))
                try:
                    self.db.session.commit()
                    created += 1
                except IntegrityError as e:
                    self.db.session.rollback()
                    logger.warning(f"Seed {model.__name__} '{name}' already inserted elsewhere: {e.orig}")

        if created:
            logger.info(f"Seeded {created} reference records")
        return created
