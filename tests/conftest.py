import pytest
from storefront import create_app
from storefront.auth import issue_token
from storefront.extensions import db as _db
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.variant import Variant


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture
def db(app):
    """Fresh schema per test on the in-memory database."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app, db):
    return app.test_client()


@pytest.fixture
def admin_headers(app):
    with app.app_context():
        token = issue_token(1, "admin@suenomio.pe", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(app):
    with app.app_context():
        token = issue_token(42, "cliente@example.com", "cliente")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def category(db):
    c = Category(name="Polos", sort_order=1)
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def make_product(db, category):
    def _make(name="Hoodie", price_pen=12990, status="ACTIVE", stock=0, **kwargs):
        p = Product(
            name=name,
            category_id=category.id,
            price_pen=price_pen,
            status=status,
            stock=stock,
            **kwargs,
        )
        db.session.add(p)
        db.session.commit()
        return p

    return _make


@pytest.fixture
def make_variant(db):
    def _make(product, color, size, stock=0, active=True, **kwargs):
        v = Variant(
            product_id=product.id,
            color=color,
            size=size,
            stock=stock,
            active=active,
            **kwargs,
        )
        db.session.add(v)
        db.session.commit()
        return v

    return _make


@pytest.fixture
def hoodie(make_product, make_variant):
    """Hoodie with (Black, S, 5) and (Black, M, 0)."""
    product = make_product("Hoodie", stock=5)
    make_variant(product, "Black", "S", stock=5)
    make_variant(product, "Black", "M", stock=0)
    return product
