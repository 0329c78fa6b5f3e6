"""
Location model — Where stock exists.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Location(models.Model):
    """
    A store, warehouse or any other place holding stock.

    Locations are stable entities, created during system setup.
    Names are unique (enforced by locations service and by the database).

    Examples:
        Location.objects.create(name='Main Store', address='12 High St')
        Location.objects.create(name='Warehouse')
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_('Name'),
    )
    description = models.TextField(
        blank=True,
        default='',
        verbose_name=_('Description'),
    )
    address = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Address'),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Active'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Location')
        verbose_name_plural = _('Locations')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name
