import uuid
from django.db import models


class InternalUser(models.Model):
    """
    A member of the internal sales team. This is the authenticated actor for
    every API call: leads are assigned to them, and activities, payments and
    audit entries are attributed to them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=50, default="sales")  # sales, manager, admin
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "internal_users"
        ordering = ["name"]

    # DRF reads these on request.user
    is_authenticated = True
    is_anonymous = False

    def __str__(self):
        return f"{self.name} <{self.email}>"
