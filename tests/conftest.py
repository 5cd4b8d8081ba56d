# tests/conftest.py

import pytest

from section_trace.core.view_frame import ViewFrame


@pytest.fixture
def section_frame():
    """Section looking north: view X = model X, view Y = model Z, crop 20 x 20 ft."""
    return ViewFrame(
        origin=(0.0, 0.0, 0.0),
        basis_x=(1.0, 0.0, 0.0),
        basis_y=(0.0, 0.0, 1.0),
        basis_z=(0.0, -1.0, 0.0),
        crop_min=(-10.0, -10.0),
        crop_max=(10.0, 10.0),
    )


@pytest.fixture
def plan_frame():
    """Identity frame: view X/Y = model X/Y, crop 0..10 on both axes."""
    return ViewFrame(
        origin=(0.0, 0.0, 0.0),
        basis_x=(1.0, 0.0, 0.0),
        basis_y=(0.0, 1.0, 0.0),
        basis_z=(0.0, 0.0, 1.0),
        crop_min=(0.0, 0.0),
        crop_max=(10.0, 10.0),
    )
