"""
Project Tasks.

Celery tasks for project lifecycle operations.
"""

from celery import shared_task
import logging

from domain.shared.exceptions import ConcurrencyException, DomainException

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def transition_project_status(
    self,
    project_id: str,
    target_status: str,
    user_id: str,
    user_name: str,
    role: str = 'viewer',
    force: bool = False,
    reason: str = None,
):
    """
    Run a lifecycle transition (and its milestone effects) off the request path.
    
    A stale write is retried; any other domain error is final and reported
    back in the result.
    """
    from uuid import UUID

    from application.ports import AuditContext
    from domain.auth.authorization import Role
    from domain.shared.value_objects import ProjectStatus
    from infrastructure.wiring import get_project_service
    
    context = AuditContext(user_id=user_id, user_name=user_name, role=Role(role))
    
    try:
        project = get_project_service().transition_status(
            UUID(project_id),
            ProjectStatus(target_status),
            context,
            force=force,
            reason=reason,
        )
    except ConcurrencyException as e:
        logger.warning(f"Concurrent update on project {project_id}, retrying: {e.message}")
        raise self.retry(exc=e, countdown=5)
    except DomainException as e:
        logger.warning(f"Transition of project {project_id} to {target_status} failed: {e.message}")
        return {'project_id': project_id, 'success': False, 'error': e.code, 'detail': e.message}
    
    logger.info(f"Project {project.project_number} transitioned to {project.status.name}")
    return {
        'project_id': project_id,
        'success': True,
        'status': project.status.value,
        'version': project.version,
    }
