from datetime import timedelta

from django.db import models
from django.db.models import Count, Sum
from django.utils import timezone


class ImageQuerySet(models.QuerySet):
    def for_source(self, source=None):
        if source:
            return self.filter(source=source)
        return self

    def newest_first(self):
        return self.order_by("-created_at", "-pk")

    def imported_since(self, since):
        return self.filter(created_at__gt=since)

    def stats(self):
        """
        Aggregate counts for the whole queryset: number of images, total bytes,
        imports in the last 24 hours and a per-source breakdown
        """
        totals = self.aggregate(total_images=Count("pk"), total_size=Sum("size"))
        recent = self.imported_since(timezone.now() - timedelta(hours=24)).count()
        by_source = {
            row["source"]: row["count"]
            for row in self.order_by()
            .values("source")
            .annotate(count=Count("pk"))
            .order_by("source")
        }
        return {
            "total_images": totals["total_images"],
            "total_size": totals["total_size"] or 0,
            "recent_imports_24h": recent,
            "by_source": by_source,
        }


class Image(models.Model):
    """
    Metadata for an image copied from an external file provider into the
    object store.

    ``storage_location`` is the public URL of the stored object. Nothing in the
    database guarantees that the object still exists; the reconciliation sweep
    removes records whose object is gone.
    """

    name = models.CharField(max_length=255)
    external_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Identifier of the file at the source provider",
    )
    size = models.BigIntegerField(default=0, help_text="Size in bytes")
    mime_type = models.CharField(max_length=100, blank=True, default="")
    storage_location = models.CharField(max_length=1024)
    source = models.CharField(max_length=50, db_index=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = ImageQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Image(external_id={self.external_id}, name={self.name})"
