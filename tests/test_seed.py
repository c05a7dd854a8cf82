from __future__ import annotations

import pytest

from conftest import default_tiers, global_tier
from printcart.data.models.price_tier import PriceTierModel
from printcart.data.seed import seed_price_tiers
from printcart.domain.errors import ConfigurationError
from printcart.repos.price_tier_repo import PriceTierRepo


def test_seed_writes_global_ladders(db):
    written = seed_price_tiers(db, default_tiers())

    assert written == 4
    us = PriceTierRepo(db).list_tiers("US")
    assert [(t.min_qty, t.max_qty) for t in us] == [(1, 49), (50, None)]


def test_reseed_replaces_global_tiers_and_keeps_scoped_ones(db):
    db.add(PriceTierModel(scope="product", scope_id=5, store="US", min_qty=1, mult=3))
    db.commit()
    seed_price_tiers(db, default_tiers())

    seed_price_tiers(db, {"US": [global_tier(mult="2")]})

    tiers = PriceTierRepo(db).list_tiers("US")
    assert sorted(t.scope for t in tiers) == ["global", "product"]
    assert len(PriceTierRepo(db).list_tiers("CA")) == 2


def test_invalid_ladder_writes_nothing(db):
    bad = {"US": [global_tier(min_qty=1, max_qty=10), global_tier(min_qty=5)]}

    with pytest.raises(ConfigurationError):
        seed_price_tiers(db, bad)
    assert PriceTierRepo(db).list_tiers("US") == []


def test_empty_ladder_is_rejected(db):
    with pytest.raises(ValueError):
        seed_price_tiers(db, {"US": []})
