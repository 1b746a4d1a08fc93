from model.catalog import ALL_CATEGORIES, Catalog


def test_lists_and_lookups(catalog, gold_chain):
    assert catalog.list_bracelets() == [gold_chain]
    assert [c.id for c in catalog.list_charms()] == ["charm-a", "charm-b", "charm-c"]
    assert catalog.get_charm("charm-b").name == "Bee"
    assert catalog.get_bracelet("missing") is None


def test_categories_start_with_all(catalog):
    assert catalog.list_charm_categories() == [ALL_CATEGORIES, "Nature", "Symbols"]
    assert len(catalog.charms_by_category(ALL_CATEGORIES)) == 3
    assert [c.id for c in catalog.charms_by_category("Symbols")] == ["charm-a"]


def test_database_errors_fail_soft(catalog, db):
    db.conn.close()

    assert catalog.list_bracelets() == []
    assert catalog.list_charms() == []
    assert catalog.charms_by_category("Nature") == []
    assert catalog.list_charm_categories() == [ALL_CATEGORIES]
    assert catalog.get_bracelet("bracelet-gold") is None
    assert catalog.get_charm("charm-a") is None


def test_asset_urls(db, charms, gold_chain):
    catalog = Catalog(db, "https://cdn.example.com/images/")

    assert catalog.get_charm_image_url(charms[0]) == "https://cdn.example.com/images/charms/red.png"
    assert catalog.get_charm_background_url(charms[0]) is None
    assert catalog.get_charm_background_url(charms[2]) == "https://cdn.example.com/images/backgrounds/blue.png"
    assert catalog.get_charm_model_url(charms[0]) is None
    assert catalog.get_bracelet_image_url(gold_chain) == "https://cdn.example.com/images/bracelets/gold.png"
    assert catalog.get_bracelet_image_url(gold_chain, open_chain=True).endswith("bracelets/gold_open.png")


def test_charm_without_image_gets_placeholder(db):
    from model.models import Charm
    url = Catalog(db).get_charm_image_url(Charm(id="x", name="X", price=1.0))
    assert url == "/images/placeholder.png"
