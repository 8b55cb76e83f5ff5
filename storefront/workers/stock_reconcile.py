"""RQ worker jobs: bring product stock back in line with variant stock."""
import logging
from flask import current_app, has_app_context
from redis.exceptions import LockError
from storefront import extensions
from storefront.extensions import db
from storefront.models.product import Product
from storefront.services import stock_service

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        from storefront import create_app

        _worker_app = create_app()
    return _worker_app


def reconcile_product_stock(product_id):
    """Resync one product. Skips when another worker holds its lock."""
    lock = None
    if extensions.redis_client is not None:
        lock = extensions.redis_client.lock(f"stock_sync:{product_id}", timeout=60)
        if not lock.acquire(blocking=False):
            logger.info("Lock held for product %d, skipping", product_id)
            return None

    try:
        result = stock_service.sync_product_stock(product_id)
        if result["stock_anterior"] != result["stock_nuevo"]:
            logger.warning(
                "Reconciled product %d: %d -> %d",
                product_id, result["stock_anterior"], result["stock_nuevo"],
            )
        return result
    finally:
        if lock is not None:
            try:
                lock.release()
            except LockError:
                logger.debug("Stock lock for product %d already expired", product_id)


def reconcile_all_stock():
    """Resync every product that still has inventory rows."""
    app = _get_app()
    with app.app_context():
        product_ids = [
            pid for (pid,) in db.session.query(Product.id)
            .filter(Product.purged_at.is_(None))
            .order_by(Product.id)
            .all()
        ]
        changed = []
        for product_id in product_ids:
            result = reconcile_product_stock(product_id)
            if result and result["stock_anterior"] != result["stock_nuevo"]:
                changed.append(result)
        logger.info(
            "Stock reconciliation done: %d products checked, %d corrected",
            len(product_ids), len(changed),
        )
        return {"revisados": len(product_ids), "corregidos": changed}


def enqueue_reconcile_all():
    """Queue the full reconciliation; runs inline when Redis is absent."""
    job = extensions.task_queue.enqueue(reconcile_all_stock)
    return getattr(job, "id", None)
