import logging
import uuid
from maintrack.models import Checklist, INPUT_TYPES, INPUT_VISUAL, INPUT_MEASUREMENT, INPUT_FUNCTIONAL
from maintrack.errors import NotFound, ValidationFailure
from maintrack.utils import as_list, parse_int

logger = logging.getLogger(__name__)


def new_task_id():
    return uuid.uuid4().hex[:12]


def build_tasks(descriptions, input_types, expected_units=None, defaults=None, task_ids=None):
    """
    Zips the parallel task arrays of the checklist form into task dicts.

    Every argument may be a scalar (single task) or a sequence. `descriptions` and
    `input_types` must have the same length; `expected_units`, `defaults` and
    `task_ids` may be shorter or missing. A supplied task id is kept so that
    resubmitting an edit form does not renumber existing tasks.
    """
    descriptions = as_list(descriptions)
    input_types = as_list(input_types)
    expected_units = as_list(expected_units)
    defaults = as_list(defaults)
    task_ids = as_list(task_ids)

    if not descriptions:
        raise ValidationFailure('A checklist needs at least one task')
    if len(input_types) != len(descriptions):
        raise ValidationFailure(
            f'Got {len(descriptions)} task descriptions but {len(input_types)} input types'
        )

    def at(values, i):
        return values[i] if i < len(values) else None

    tasks = []
    seen_ids = set()
    for i, description in enumerate(descriptions):
        description = (description or '').strip()
        if not description:
            raise ValidationFailure(f'Task {i + 1} has no description')

        input_type = (input_types[i] or INPUT_VISUAL).strip()
        if input_type not in INPUT_TYPES:
            raise ValidationFailure(f'Unknown input type for task {i + 1}: {input_type}')

        task_id = (at(task_ids, i) or '').strip()
        if not task_id or task_id in seen_ids:
            task_id = new_task_id()
        seen_ids.add(task_id)

        actual_value = None
        if input_type == INPUT_FUNCTIONAL:
            actual_value = (at(defaults, i) or '').strip() or None

        tasks.append({
            'id': task_id,
            'description': description,
            'inputType': input_type,
            'expectedUnit': (at(expected_units, i) or '').strip() if input_type == INPUT_MEASUREMENT else '',
            'actualValue': actual_value,
            'note': '',
            'materialUsed': '',
            'status': 'pending',
            'photos': []
        })
    return tasks


class ChecklistService:
    def __init__(self, db):
        self.db = db

    def get(self, checklist_id):
        return self.db.session.get(Checklist, checklist_id)

    def list_for_creator(self, user_id):
        return Checklist.query.filter_by(created_by_id=user_id)\
            .order_by(Checklist.order.asc(), Checklist.created_at.asc()).all()

    def create_checklist(self, title, tasks, created_by_id):
        title = (title or '').strip()
        if not title:
            raise ValidationFailure('Checklist title is required')

        last_order = self.db.session.query(self.db.func.max(Checklist.order))\
            .filter(Checklist.created_by_id == created_by_id).scalar()

        checklist = Checklist(
            title=title,
            tasks=tasks,
            created_by_id=created_by_id,
            order=0 if last_order is None else last_order + 1
        )
        self.db.session.add(checklist)
        self.db.session.commit()
        logger.info(f"Created checklist {checklist.id} ({checklist.title}) with {len(tasks)} tasks")
        return checklist

    def edit_checklist(self, checklist_id, title, tasks):
        """Replaces the title and the whole task list; tasks not resubmitted are dropped."""
        checklist = self.get(checklist_id)
        if not checklist:
            raise NotFound('Checklist not found')

        title = (title or '').strip()
        if not title:
            raise ValidationFailure('Checklist title is required')

        checklist.title = title
        checklist.tasks = list(tasks) # New list object so the JSON column is flagged dirty
        self.db.session.commit()
        logger.info(f"Edited checklist {checklist.id}: {len(tasks)} tasks")
        return checklist

    def delete_checklist(self, checklist_id):
        checklist = self.get(checklist_id)
        if not checklist:
            raise NotFound('Checklist not found')

        removed = len(checklist.assignments)
        self.db.session.delete(checklist)
        self.db.session.commit()
        logger.info(f"Deleted checklist {checklist_id} and {removed} assignment rows")

    def reorder(self, ids_in_order, user_id):
        """
        Writes order = position for each id in the given sequence.
        Ids that are unknown or belong to another supervisor are skipped.
        """
        updated = 0
        for index, raw_id in enumerate(as_list(ids_in_order)):
            checklist = self.get(parse_int(raw_id, 'checklist id'))
            if not checklist or checklist.created_by_id != user_id:
                logger.warning(f"Reorder by user {user_id} skipped checklist {raw_id}")
                continue
            checklist.order = index
            updated += 1

        self.db.session.commit()
        return updated
