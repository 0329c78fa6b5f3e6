"""
Stock alerts — derive LOW_STOCK / EXPIRY / REORDER alerts from stock state.

Usage:
    from stockledger.services.alerts import AlertEvaluator

    evaluator = AlertEvaluator()
    created = evaluator.evaluate(product.pk)      # after a stock change
    evaluator.evaluate_expiry(batch)              # after a batch is saved
    evaluator.check_expiring_batches()            # periodic scan

De-duplication: at most one active, unresolved alert per (product, type).
The product row is locked before the existence check so concurrent
evaluations for the same product serialize instead of both inserting.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta

from django.utils import timezone

from stockledger.conf import stockledger_settings
from stockledger.exceptions import NotFoundError
from stockledger.models.alert import Alert
from stockledger.models.enums import AlertSeverity, AlertType

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class AlertPolicyConfig:
    """Thresholds and switches for alert evaluation."""

    low_stock_enabled: bool = True
    expiry_enabled: bool = True
    reorder_enabled: bool = False
    expiry_warning_days: int = 30
    reorder_point_ratio: float = 0.5

    @classmethod
    def from_settings(cls) -> AlertPolicyConfig:
        return cls(
            low_stock_enabled=stockledger_settings.LOW_STOCK_ALERTS,
            expiry_enabled=stockledger_settings.EXPIRY_ALERTS,
            reorder_enabled=stockledger_settings.REORDER_ALERTS,
            expiry_warning_days=stockledger_settings.EXPIRY_WARNING_DAYS,
            reorder_point_ratio=stockledger_settings.REORDER_POINT_RATIO,
        )


class AlertEvaluator:
    """Creates alerts from post-mutation state. Never auto-resolves."""

    def __init__(self, policy: AlertPolicyConfig | None = None, repository=None):
        if repository is None:
            from stockledger.adapters import get_repository
            repository = get_repository()
        self.policy = policy or AlertPolicyConfig.from_settings()
        self.repository = repository

    # ══════════════════════════════════════════════════════════════
    # STOCK LEVEL
    # ══════════════════════════════════════════════════════════════

    def evaluate(self, product_id: int) -> list[Alert]:
        """
        Evaluate stock-level alerts for a product.

        totalStock is the sum of quantity across all of the product's cells:
        - totalStock == 0          -> LOW_STOCK, high, "out of stock"
        - totalStock <= min_stock  -> LOW_STOCK, medium, "low stock"
        - otherwise nothing; existing alerts are left alone

        Returns:
            Alerts created by this call (empty when deduplicated)
        """
        created = []

        with self.repository.atomic():
            product = self.repository.get_product(product_id, lock=True)
            if product is None:
                raise NotFoundError(message="Product not found", product_id=product_id)

            total = self.repository.total_quantity(product_id)

            if self.policy.low_stock_enabled:
                if total == 0:
                    alert = self._ensure(
                        product, AlertType.LOW_STOCK, AlertSeverity.HIGH,
                        f"Out of stock alert: {product.name} is out of stock",
                    )
                elif total <= product.min_stock:
                    alert = self._ensure(
                        product, AlertType.LOW_STOCK, AlertSeverity.MEDIUM,
                        f"Low stock alert: {product.name} "
                        f"({total} remaining, min: {product.min_stock})",
                    )
                else:
                    alert = None
                if alert is not None:
                    created.append(alert)

            if self.policy.reorder_enabled and product.max_stock:
                reorder_point = product.max_stock * self.policy.reorder_point_ratio
                if total <= reorder_point:
                    severity = (AlertSeverity.HIGH if total <= product.min_stock
                                else AlertSeverity.MEDIUM)
                    alert = self._ensure(
                        product, AlertType.REORDER, severity,
                        f"Reorder alert: {product.name} stock is low "
                        f"({total} remaining, reorder at {math.floor(reorder_point)})",
                    )
                    if alert is not None:
                        created.append(alert)

        return created

    # ══════════════════════════════════════════════════════════════
    # EXPIRY
    # ══════════════════════════════════════════════════════════════

    def evaluate_expiry(self, batch, today: date | None = None) -> Alert | None:
        """
        Evaluate the EXPIRY alert for one batch.

        Raised when the expiry date falls within the warning window:
        severity high if already past, medium otherwise. Products with
        track_expiry=False are skipped.
        """
        if not self.policy.expiry_enabled or batch.expiry_date is None:
            return None

        today = today or date.today()
        window_end = today + timedelta(days=self.policy.expiry_warning_days)
        if batch.expiry_date > window_end:
            return None

        with self.repository.atomic():
            product = self.repository.get_product(batch.product_id, lock=True)
            if product is None:
                raise NotFoundError(message="Product not found", product_id=batch.product_id)
            if not product.track_expiry:
                return None

            if batch.expiry_date < today:
                severity = AlertSeverity.HIGH
                message = (f"Expired batch alert: {product.name} has expired on "
                           f"{batch.expiry_date.isoformat()}")
            else:
                severity = AlertSeverity.MEDIUM
                message = (f"Expiry alert: {product.name} will expire on "
                           f"{batch.expiry_date.isoformat()}")

            return self._ensure(product, AlertType.EXPIRY, severity, message)

    def check_expiring_batches(self, today: date | None = None) -> list[Alert]:
        """
        Scan all batches expiring inside the window.

        Run periodically (cron, celery beat) or via the
        check_expiring_batches management command.
        """
        today = today or date.today()
        window_end = today + timedelta(days=self.policy.expiry_warning_days)
        created = []
        batches = self.repository.list_expiring_batches(window_end)

        for batch in batches:
            alert = self.evaluate_expiry(batch, today=today)
            if alert is not None:
                created.append(alert)

        logger.info(
            "alert.expiry.scan",
            extra={"batches": len(batches), "alerts_created": len(created)},
        )
        return created

    # ══════════════════════════════════════════════════════════════
    # RESOLUTION
    # ══════════════════════════════════════════════════════════════

    def resolve(self, alert_id: int) -> Alert:
        """Mark alert as handled: resolved and no longer active."""
        with self.repository.atomic():
            self._get_alert(alert_id)
            alert = self.repository.update_alert(
                alert_id,
                is_resolved=True,
                is_active=False,
                resolved_at=timezone.now(),
            )
        logger.info("alert.resolved", extra={"alert_id": alert_id, "type": alert.type})
        return alert

    def dismiss(self, alert_id: int) -> Alert:
        """Hide alert without resolving it."""
        with self.repository.atomic():
            self._get_alert(alert_id)
            alert = self.repository.update_alert(alert_id, is_active=False)
        logger.info("alert.dismissed", extra={"alert_id": alert_id, "type": alert.type})
        return alert

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    def _get_alert(self, alert_id: int) -> Alert:
        alert = self.repository.get_alert(alert_id, lock=True)
        if alert is None:
            raise NotFoundError(message="Alert not found", alert_id=alert_id)
        return alert

    def _ensure(self, product, alert_type: str, severity: str, message: str) -> Alert | None:
        """Create the alert unless an open one of the same type exists."""
        if self.repository.find_active_alert(product.pk, alert_type) is not None:
            return None

        alert = self.repository.create_alert(Alert(
            product=product,
            type=alert_type,
            severity=severity,
            message=message,
        ))
        logger.warning(
            "alert.created",
            extra={
                "alert_id": alert.pk,
                "product_id": product.pk,
                "type": alert_type,
                "severity": severity,
            },
        )
        return alert
