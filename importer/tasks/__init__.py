"""
Celery tasks of the importer app.

The submodules are loaded by ``imagehub.celery`` once the Celery app is
finalized so every task is registered before a job is dispatched.
"""
