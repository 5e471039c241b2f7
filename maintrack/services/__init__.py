from maintrack.services.user_service import UserService
from maintrack.services.taxonomy_service import TaxonomyService
from maintrack.services.asset_service import AssetService
from maintrack.services.checklist_service import ChecklistService
from maintrack.services.assignment_service import AssignmentService


class Services:
    """Built once per app in create_app and reached from handlers as current_app.services."""

    def __init__(self, db):
        self.users = UserService(db)
        self.taxonomy = TaxonomyService(db)
        self.assets = AssetService(db)
        self.checklists = ChecklistService(db)
        self.assignments = AssignmentService(db)
