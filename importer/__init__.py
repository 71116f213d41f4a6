"""
Design
======

The importer copies the images of a remote folder into the object store and
records an Image row for each of them.

General goals:

* All job state is stored in the database and visible to pollers
* Celery delivers jobs at least once; the job row is checked before any work
  starts so a redelivered job which already finished is not run again
* A single image failing to import never fails the whole job

The import process works like this:

1. A caller submits a folder URL. The folder id is extracted and validated
   synchronously; bad references are rejected before anything is queued.
2. An ImportJob row is created and, once committed, a Celery task with the
   same id is published to the import queue.
3. A worker runs the task under a rate limit and a concurrency cap. The task
   lists the image files of the folder; a failure here fails the attempt and
   the job is retried with an exponential backoff.
4. Each listed file is handled in order: files which were imported before are
   skipped, the others are streamed into the object store and recorded as
   Image rows. Failures are counted and the job moves on to the next file.
   Progress is stored on the job after every file.
5. The counts are stored as the job's result and the job is completed.

Separately, a reconciliation sweep removes Image rows whose stored object no
longer exists.
"""
