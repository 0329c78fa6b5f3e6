"""
Location maintenance. Names are unique.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Q

from stockledger.exceptions import DuplicateError, NotFoundError, ReferencedError
from stockledger.models.location import Location
from stockledger.models.transfer import Transfer
from stockledger.requests import LocationRequest

logger = logging.getLogger('stockledger')


def create_location(request: LocationRequest) -> Location:
    with transaction.atomic():
        if Location.objects.filter(name=request.name).exists():
            raise DuplicateError(message="Location already exists", name=request.name)
        location = Location.objects.create(
            name=request.name,
            description=request.description,
            address=request.address,
        )

    logger.info("location.created", extra={"location_id": location.pk, "location_name": location.name})
    return location


def update_location(location_id: int, request: LocationRequest) -> Location:
    with transaction.atomic():
        location = Location.objects.select_for_update().filter(pk=location_id).first()
        if location is None:
            raise NotFoundError(message="Location not found", location_id=location_id)

        if Location.objects.filter(name=request.name).exclude(pk=location_id).exists():
            raise DuplicateError(
                message="Location with this name already exists",
                name=request.name,
            )

        location.name = request.name
        location.description = request.description
        location.address = request.address
        location.save()

    logger.info("location.updated", extra={"location_id": location_id})
    return location


def delete_location(location_id: int) -> None:
    """
    Refused while stock cells, transfers or sales reference the location.
    """
    with transaction.atomic():
        location = Location.objects.select_for_update().filter(pk=location_id).first()
        if location is None:
            raise NotFoundError(message="Location not found", location_id=location_id)

        has_transfers = Transfer.objects.filter(
            Q(from_location_id=location_id) | Q(to_location_id=location_id)
        ).exists()
        if location.cells.exists() or has_transfers or location.sales.exists():
            raise ReferencedError(
                message="Cannot delete location with existing stock items or transfers",
                location_id=location_id,
            )
        location.delete()

    logger.info("location.deleted", extra={"location_id": location_id})
