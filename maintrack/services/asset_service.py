import logging
from maintrack.models import Asset, AssetCategory, Floor, Zone, Division
from maintrack.errors import NotFound, ValidationFailure
from maintrack.utils import parse_optional_int

logger = logging.getLogger(__name__)


class AssetService:
    def __init__(self, db):
        self.db = db

    def get(self, asset_id):
        return self.db.session.get(Asset, asset_id)

    def list_assets(self, division_id=None):
        """All assets, or only those of `division_id` when given."""
        query = Asset.query.options(
            self.db.joinedload(Asset.category),
            self.db.joinedload(Asset.floor),
            self.db.joinedload(Asset.zone)
        )
        if division_id is not None:
            query = query.filter(Asset.division_id == division_id)
        return query.order_by(Asset.name).all()

    def create_asset(self, attrs, division_id):
        """Creates an asset; the division is always the acting supervisor's, never taken from attrs."""
        if division_id is None or not self.db.session.get(Division, division_id):
            raise ValidationFailure('Assets must belong to a division')

        values = self._clean(attrs)
        asset = Asset(division_id=division_id, **values)
        self.db.session.add(asset)
        self.db.session.commit()
        logger.info(f"Created asset {asset.id} ({asset.name}) in division {division_id}")
        return asset

    def update_asset(self, asset_id, attrs):
        asset = self.get(asset_id)
        if not asset:
            raise NotFound('Asset not found')

        for key, value in self._clean(attrs).items():
            setattr(asset, key, value)
        self.db.session.commit()
        logger.info(f"Updated asset {asset.id}")
        return asset

    def delete_asset(self, asset_id):
        """Hard delete; checklist assignment rows for the asset go with it."""
        asset = self.get(asset_id)
        if not asset:
            raise NotFound('Asset not found')

        removed = len(asset.assignments)
        self.db.session.delete(asset)
        self.db.session.commit()
        logger.info(f"Deleted asset {asset_id} and {removed} assignment rows")

    def _clean(self, attrs):
        name = (attrs.get('name') or '').strip()
        if not name:
            raise ValidationFailure('Asset name is required')

        category_id = parse_optional_int(attrs.get('category_id'), 'category')
        if category_id is None or not self.db.session.get(AssetCategory, category_id):
            raise ValidationFailure('A valid asset category is required')

        floor_id = parse_optional_int(attrs.get('floor_id'), 'floor')
        if floor_id is not None and not self.db.session.get(Floor, floor_id):
            raise ValidationFailure(f'Unknown floor: {floor_id}')

        zone_id = parse_optional_int(attrs.get('zone_id'), 'zone')
        if zone_id is not None and not self.db.session.get(Zone, zone_id):
            raise ValidationFailure(f'Unknown zone: {zone_id}')

        return {
            'name': name,
            'description': (attrs.get('description') or '').strip(),
            'location': (attrs.get('location') or '').strip(),
            'category_id': category_id,
            'floor_id': floor_id,
            'zone_id': zone_id,
        }
