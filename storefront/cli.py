"""Flask CLI commands for admin operations."""
import click


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed default categories."""
        from storefront.extensions import db
        from storefront.models.category import Category

        db.create_all()

        defaults = ["Polos", "Casacas", "Pantalones", "Vestidos", "Accesorios"]
        for order, name in enumerate(defaults, start=1):
            if not Category.query.filter_by(name=name).first():
                db.session.add(Category(name=name, sort_order=order))
        db.session.commit()

        click.echo("Database initialized with default categories.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo products with variants (idempotent)."""
        from storefront.extensions import db
        from storefront.models.category import Category
        from storefront.models.product import Product
        from storefront.models.variant import Variant
        from storefront.services import stock_service

        # Only seed if no products exist yet
        if Product.query.first():
            click.echo("Products already exist, skipping demo seed.")
            return

        category = Category.query.filter_by(active=True).order_by(Category.sort_order).first()
        if not category:
            category = Category(name="Polos", sort_order=1)
            db.session.add(category)
            db.session.flush()

        demo_products = [
            ("Hoodie Oversize", 12990, {"Negro": {"S": 5, "M": 0, "L": 3}, "Gris": {"M": 4}}),
            ("Polo Básico", 4990, {"Blanco": {"S": 10, "M": 12, "L": 8}}),
            ("Casaca Denim", 18990, {"Azul": {"M": 2, "L": 2, "XL": 1}}),
        ]
        for name, price, colors in demo_products:
            product = Product(name=name, category_id=category.id, price_pen=price)
            db.session.add(product)
            db.session.flush()
            for color, sizes in colors.items():
                for size, stock in sizes.items():
                    db.session.add(
                        Variant(product_id=product.id, color=color, size=size, stock=stock)
                    )
            stock_service.resync(product)
        db.session.commit()
        click.echo(f"Seeded {len(demo_products)} demo products.")

    @app.cli.command("issue-token")
    @click.argument("user_id", type=int)
    @click.option("--email", default="admin@localhost")
    @click.option("--role", default="admin", type=click.Choice(["admin", "cliente"]))
    def issue_token_cmd(user_id, email, role):
        """Print a bearer token for local development."""
        from storefront.auth import issue_token

        click.echo(issue_token(user_id, email, role))

    @app.cli.command("stock-report")
    def stock_report():
        """List products whose stock differs from their variants."""
        from storefront.services.stock_service import find_discrepancies

        rows = find_discrepancies()
        if not rows:
            click.echo("All product stock matches variant stock.")
            return
        for row in rows:
            click.echo(
                f"  #{row['producto_id']} {row['nombre']}: "
                f"product={row['stock_producto']} variants={row['stock_variantes']}"
            )

    @app.cli.command("reconcile-stock")
    @click.option("--enqueue", is_flag=True, help="Queue the job instead of running it here")
    def reconcile_stock(enqueue):
        """Resync every product's stock from its variants."""
        from storefront.workers.stock_reconcile import (
            enqueue_reconcile_all,
            reconcile_all_stock,
        )

        if enqueue:
            job_id = enqueue_reconcile_all()
            click.echo(f"Queued reconciliation job: {job_id or 'ran inline'}")
            return
        result = reconcile_all_stock()
        click.echo(
            f"Checked {result['revisados']} products, "
            f"corrected {len(result['corregidos'])}."
        )

    @app.cli.command("stats")
    def stats():
        """Show product and order statistics."""
        from storefront.services.product_service import get_stats

        s = get_stats()
        click.echo(f"Total products: {s['total_productos']}")
        for status, count in sorted(s["productos_por_estado"].items()):
            click.echo(f"  {status}: {count}")
        click.echo(f"Low stock: {s['productos_stock_bajo']}")
        click.echo(f"Stock discrepancies: {s['discrepancias_stock']}")
        click.echo(f"Orders: {s['total_pedidos']} ({s['pedidos_pendientes']} pending)")
