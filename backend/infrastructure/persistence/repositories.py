"""
Django ORM implementation of the Project repository.
"""

import logging
import re
from typing import List, Optional
from uuid import UUID

from django.db import transaction

from domain.project.aggregates import Project
from domain.project.repositories import ProjectRepository
from domain.shared.exceptions import ConcurrencyException
from domain.shared.value_objects import ProjectStatus, ProjectType

from . import mappers
from .models import ProjectRecord

logger = logging.getLogger(__name__)

PROJECT_NUMBER_PATTERN = re.compile(r'^PRJ-(\d{4})-(\d+)$')


class DjangoProjectRepository(ProjectRepository):
    """
    Stores each Project aggregate as one ``ProjectRecord`` row.

    The record's ``version`` column is authoritative; the version inside the
    JSON document is overwritten on load.
    """

    def get_by_id(self, project_id: UUID) -> Optional[Project]:
        record = ProjectRecord.objects.filter(pk=project_id).first()
        if record is None:
            return None
        return self._to_domain(record)

    def get_all(
        self,
        status: Optional[ProjectStatus] = None,
        project_type: Optional[ProjectType] = None,
        client_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Project]:
        queryset = ProjectRecord.objects.all()
        if status:
            queryset = queryset.filter(status=status.value)
        if project_type:
            queryset = queryset.filter(project_type=project_type.value)
        if client_id:
            queryset = queryset.filter(client_id=client_id)
        if not include_archived:
            queryset = queryset.filter(archived_at__isnull=True)
        return [self._to_domain(record) for record in queryset]

    def save(self, project: Project) -> Project:
        with transaction.atomic():
            record = (
                ProjectRecord.all_objects
                .select_for_update()
                .filter(pk=project.id)
                .first()
            )
            if record is None:
                record = ProjectRecord(id=project.id, version=1)
            elif record.version != project.version:
                logger.warning(
                    "Stale write to %s: stored version %d, aggregate version %d",
                    project.project_number, record.version, project.version,
                )
                raise ConcurrencyException("Project", project.id, project.version)

            self._fill(record, project)
            record.save()

        project.version = record.version
        return project

    def delete(self, project_id: UUID) -> bool:
        record = ProjectRecord.objects.filter(pk=project_id).first()
        if record is None:
            return False
        record.soft_delete()
        return True

    def next_project_number(self, year: int) -> str:
        prefix = f'PRJ-{year}-'
        numbers = (
            ProjectRecord.all_objects
            .filter(project_number__startswith=prefix)
            .values_list('project_number', flat=True)
        )
        highest = 0
        for number in numbers:
            match = PROJECT_NUMBER_PATTERN.match(number)
            if match:
                highest = max(highest, int(match.group(2)))
        return f'{prefix}{highest + 1:04d}'

    def atomic(self):
        return transaction.atomic()

    # =========================================================================
    # MAPPING
    # =========================================================================

    @staticmethod
    def _to_domain(record: ProjectRecord) -> Project:
        project = mappers.from_document(record.document)
        project.version = record.version
        return project

    @staticmethod
    def _fill(record: ProjectRecord, project: Project) -> None:
        record.project_number = project.project_number
        record.title = project.title
        record.project_type = project.type.value
        record.status = project.status.value
        record.client_id = project.client_id
        record.archived_at = project.archived_at
        record.document = mappers.to_document(project)
