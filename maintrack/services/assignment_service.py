import logging
import re
from sqlalchemy.exc import SQLAlchemyError
from maintrack.models import ChecklistAssignment, Checklist, Asset, get_now
from maintrack.errors import NotFound, Forbidden
from maintrack.utils import as_list, parse_int, save_upload, delete_upload

logger = logging.getLogger(__name__)

FIELD_PATTERN = re.compile(r'^(?P<prefix>\w+)\[(?P<key>[^\]]+)\]$')


def collect_bracketed(multidict, prefix):
    """
    Groups `prefix[<key>]` fields of a form/files MultiDict by key.
    Returns {key: [values...]} in submission order.
    """
    grouped = {}
    for field in multidict.keys():
        match = FIELD_PATTERN.match(field)
        if not match or match.group('prefix') != prefix:
            continue
        grouped.setdefault(match.group('key'), []).extend(multidict.getlist(field))
    return grouped


class AssignmentService:
    """
    Template rows (is_template=True) mark a checklist as assigned to an asset.
    Submission rows (is_template=False) are one completed execution each and are never updated.
    """

    def __init__(self, db):
        self.db = db

    def get(self, assignment_id):
        return self.db.session.get(ChecklistAssignment, assignment_id)

    def get_template(self, assignment_id):
        assignment = self.get(assignment_id)
        if not assignment or not assignment.is_template:
            raise NotFound('Checklist assignment not found')
        return assignment

    def get_submission(self, assignment_id):
        assignment = self.get(assignment_id)
        if not assignment or assignment.is_template:
            raise NotFound('Checklist submission not found')
        return assignment

    def list_templates_for_checklist(self, checklist_id):
        return ChecklistAssignment.query.filter_by(checklist_id=checklist_id, is_template=True)\
            .order_by(ChecklistAssignment.id).all()

    def assign_checklist_to_assets(self, checklist_id, asset_ids, division_id):
        """
        Replaces every template row of the checklist with one row per asset id.
        An empty list clears the assignments. Assets outside `division_id` are rejected.
        """
        checklist = self.db.session.get(Checklist, checklist_id)
        if not checklist:
            raise NotFound('Checklist not found')

        assets = []
        seen = set()
        for raw_id in as_list(asset_ids):
            asset_id = parse_int(raw_id, 'asset id')
            if asset_id in seen:
                continue
            seen.add(asset_id)

            asset = self.db.session.get(Asset, asset_id)
            if not asset:
                raise NotFound(f'Asset {asset_id} not found')
            if asset.division_id != division_id:
                raise Forbidden(f'Asset {asset_id} belongs to another division')
            assets.append(asset)

        current = self.list_templates_for_checklist(checklist.id)
        for row in current:
            self.db.session.delete(row)
        self.db.session.flush()

        now = get_now()
        for asset in assets:
            self.db.session.add(ChecklistAssignment(
                checklist=checklist,
                asset=asset,
                assigned_at=now,
                is_template=True
            ))
        self.db.session.commit()

        logger.info(f"Checklist {checklist.id}: replaced {len(current)} assignments with {len(assets)}")
        return self.list_templates_for_checklist(checklist.id)

    def list_templates_for_division(self, division_id):
        """The technician work queue: template rows whose asset is in the division."""
        return ChecklistAssignment.query\
            .join(Asset, ChecklistAssignment.asset_id == Asset.id)\
            .join(Checklist, ChecklistAssignment.checklist_id == Checklist.id)\
            .options(self.db.contains_eager(ChecklistAssignment.asset),
                     self.db.contains_eager(ChecklistAssignment.checklist))\
            .filter(Asset.division_id == division_id, ChecklistAssignment.is_template.is_(True))\
            .order_by(Checklist.order.asc(), Asset.name.asc()).all()

    def list_completed_for_division(self, division_id):
        return ChecklistAssignment.query\
            .join(Asset, ChecklistAssignment.asset_id == Asset.id)\
            .options(self.db.contains_eager(ChecklistAssignment.asset),
                     self.db.joinedload(ChecklistAssignment.checklist),
                     self.db.joinedload(ChecklistAssignment.submitted_by))\
            .filter(Asset.division_id == division_id,
                    ChecklistAssignment.is_template.is_(False),
                    ChecklistAssignment.completed_at.isnot(None))\
            .order_by(ChecklistAssignment.completed_at.desc(), ChecklistAssignment.id.desc()).all()

    def submit_checklist(self, assignment_id, form, files, user_id):
        """
        Records one execution of a template assignment as a new submission row.

        `form` and `files` are request MultiDicts. Values are read from
        `results[<taskId>]`; a file uploaded under the same name makes the
        response the list of stored paths. `notes[<taskId>]` and
        `materials[<taskId>]` are stored alongside. The template row is not touched.
        """
        template = self.get_template(assignment_id)
        tasks = template.checklist.tasks or []
        task_ids = {t['id'] for t in tasks}

        def by_task(grouped, label):
            values = {}
            for task_id, entries in grouped.items():
                if task_id not in task_ids:
                    logger.warning(f"Submission for assignment {template.id} ignored unknown task {task_id} ({label})")
                    continue
                text = next((e.strip() for e in entries if isinstance(e, str) and e.strip()), None)
                if text is not None:
                    values[task_id] = text
            return values

        responses = by_task(collect_bracketed(form, 'results'), 'results')
        notes = by_task(collect_bracketed(form, 'notes'), 'notes')
        materials = by_task(collect_bracketed(form, 'materials'), 'materials')

        stored = []
        for task_id, uploads in collect_bracketed(files, 'results').items():
            if task_id not in task_ids:
                logger.warning(f"Submission for assignment {template.id} ignored upload for unknown task {task_id}")
                continue
            paths = [p for p in (save_upload(f) for f in uploads) if p]
            stored.extend(paths)
            if paths:
                responses[task_id] = paths

        submission = ChecklistAssignment(
            checklist=template.checklist,
            asset=template.asset,
            assigned_at=template.assigned_at,
            is_template=False,
            responses=responses,
            notes=notes,
            materials_used=materials,
            task_snapshot=[dict(t) for t in tasks],
            completed_at=get_now(),
            submitted_by_id=user_id
        )
        self.db.session.add(submission)
        try:
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            logger.error(f"Submission for assignment {template.id} failed; removing {len(stored)} uploads")
            for path in stored:
                delete_upload(path)
            raise

        logger.info(f"User {user_id} submitted assignment {template.id} as {submission.id} ({len(responses)} responses)")
        return submission
