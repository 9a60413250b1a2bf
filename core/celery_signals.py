import logging

from celery.signals import task_failure, task_postrun
from core.utils import structured_log
from core.metrics import task_failures_total

logger = logging.getLogger(__name__)


@task_postrun.connect
def on_task_success(sender=None, task_id=None, retval=None, state=None, **extras):
    if state != "SUCCESS":
        return
    task = getattr(sender, "name", "unknown")
    structured_log("task.success", task=task, task_id=task_id, result=repr(retval))


@task_failure.connect
def on_task_failure(sender=None, exception=None, args=(), kwargs=None, **extras):
    task = getattr(sender, "name", "unknown")
    logger.error("Task %s failed: %s", task, exception)
    structured_log(
        "task.failure",
        task=task,
        task_id=extras.get("task_id"),
        args=[repr(a) for a in args],
        kwargs={k: repr(v) for k, v in (kwargs or {}).items()},
        exc=str(exception),
    )
    task_failures_total.labels(task=task).inc()
