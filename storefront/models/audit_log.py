from datetime import datetime, timezone
from storefront.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.Integer, nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "CREATE_PRODUCT",
        "UPDATE_PRODUCT",
        "ACTIVATE",
        "DEACTIVATE",
        "SOFT_DELETE",
        "RESTORE",
        "PURGE",
        "CREATE_VARIANT",
        "BULK_CREATE_VARIANTS",
        "UPDATE_VARIANT",
        "DELETE_VARIANT",
        "SET_COLOR_IMAGES",
        "DELETE_COLOR_IMAGES",
        "SYNC_STOCK",
        "SET_ORDER_STATUS",
    }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_id}>"
