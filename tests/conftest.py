import pytest

from egress.datasets.loader import load_dataset
from egress.models.schema import Building, EvaluationContext, Exit, Project, Route, Space, Stair


@pytest.fixture(scope="session")
def dataset():
    return load_dataset()


def make_building(**overrides):
    data = dict(name="Test Building", height_category="Н", functional_class="Ф4.1")
    data.update(overrides)
    return Building(**data)


def make_space(**overrides):
    data = dict(id="space-1", name="Test Space", purpose="Office", floor=0, area_m2=100)
    data.update(overrides)
    return Space(**data)


def make_exit(**overrides):
    data = dict(id="exit-1", name="Main Exit", width_m=1.2, serves_space_ids=["space-1"], serves_floors=[0])
    data.update(overrides)
    return Exit(**data)


def make_route(**overrides):
    data = dict(
        id="route-1",
        from_space_id="space-1",
        to_exit_id="exit-1",
        length_m=15,
        evacuation_type="single_direction",
    )
    data.update(overrides)
    return Route(**data)


def make_stair(**overrides):
    data = dict(id="stair-1", name="Main Stair", type="enclosed", width_m=1.2, serves_floors=[0, 1])
    data.update(overrides)
    return Stair(**data)


def make_project(**overrides):
    data = dict(id="test-project", name="Test Project", building=make_building(), spaces=[make_space()])
    data.update(overrides)
    return Project(**data)


@pytest.fixture
def ctx_for(dataset):
    """Build an evaluation context from project overrides."""

    def _build(**overrides):
        return EvaluationContext(project=make_project(**overrides), dataset=dataset)

    return _build
