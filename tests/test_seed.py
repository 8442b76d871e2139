from app.data.models.product import ProductModel
from app.data.seed import seed, PRODUCTS


def test_seed_fills_empty_catalog(session_factory, db_session):
    assert seed(session_factory) == len(PRODUCTS)
    names = {p.name for p in db_session.query(ProductModel).all()}
    assert names == {p["name"] for p in PRODUCTS}


def test_seed_skips_non_empty_catalog(session_factory):
    seed(session_factory)
    assert seed(session_factory) == 0
