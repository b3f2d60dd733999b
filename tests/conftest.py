import os
from decimal import Decimal

import pytest

# The web app builds its stores at import time
os.environ.setdefault("BOAT_CALC_DATABASE_URL", "sqlite://")

from boat_calc.data_models import Contribution


def make_contributions(*amounts):
    return [
        Contribution(identifier=i + 1, display_name=f"Person {i + 1}", amount=Decimal(str(a)))
        for i, a in enumerate(amounts)
    ]


@pytest.fixture
def contributions():
    return make_contributions
