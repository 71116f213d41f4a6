import logging

from celery import current_task


def current_job_id():
    """
    Return the id of the job the current Celery task is executing, if any.
    Import tasks use the job id as their task id.
    """
    task = current_task
    if task and task.request.id:
        return task.request.id
    return None


class CeleryTaskIDFilter(logging.Filter):
    def filter(self, record):
        job_id = current_job_id()
        record.task_id = f"/[{job_id}]" if job_id else ""
        # This just tells the logger to not discard this record
        return True


def add_job_id(logger, method_name, event_dict):
    """
    structlog processor adding the current job id to structured events
    """
    job_id = current_job_id()
    if job_id:
        event_dict.setdefault("job_id", job_id)
    return event_dict
