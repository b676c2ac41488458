# apps/core/models.py
from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.core.domain.roles import CurrentUser, Role


class Member(models.Model):
    """Członek zespołu (rola decyduje o uprawnieniach)."""

    class RoleChoices(models.TextChoices):
        MD = Role.MD.value, 'MD'
        DIRECTOR = Role.DIRECTOR.value, 'Director'
        ADMIN_MANAGER = Role.ADMIN_MANAGER.value, 'Admin Manager'
        OPERATION_MANAGER = Role.OPERATION_MANAGER.value, 'Operation Manager'
        SUPER_LEADER = Role.SUPER_LEADER.value, 'Super Leader'
        TEAM_LEADER = Role.TEAM_LEADER.value, 'Team Leader'
        SUB_TEAM_LEADER = Role.SUB_TEAM_LEADER.value, 'Sub-team Leader'
        STAFF = Role.STAFF.value, 'Staff'

    # Konto logowania jest opcjonalne (nie każdy członek zespołu się loguje)
    user = models.OneToOneField(
        User,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='member'
    )
    name = models.CharField(max_length=200)
    role = models.CharField(max_length=30, choices=RoleChoices.choices, default=RoleChoices.STAFF)
    title = models.CharField(max_length=200, blank=True)
    office_location = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.role})"

    def as_current_user(self) -> CurrentUser:
        return CurrentUser(id=self.id, role=Role(self.role), name=self.name)


# Sygnał: członek zespołu tworzony automatycznie przy tworzeniu Usera
@receiver(post_save, sender=User)
def create_member(sender, instance, created, **kwargs):
    if created and not Member.objects.filter(user=instance).exists():
        Member.objects.create(user=instance, name=instance.get_full_name() or instance.username)
