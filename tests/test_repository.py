"""
Tests for materialization and variable profiles
"""

from custom_components.google_traffic.const import PROFILE_PLUS_MINUTES, PROFILE_STRING
from custom_components.google_traffic.models import DestinationResult, PollResult
from custom_components.google_traffic.repository import (
    VARIABLE_PROFILES,
    make_ident,
    materialize,
    name_key,
    profile_for,
)


def sample_result():
    return PollResult(
        origin_address="Home",
        destinations={
            "Work": DestinationResult("12 km", "20 mins, +3 Minutes", 3.0),
            "Gym": DestinationResult("2 km", "5 mins", 0.0),
        },
    )


class TestMaterialize:
    """Test writing a record set through a repository"""

    def test_layout(self, memory_repository):
        materialize(memory_repository, "root", sample_result().records())

        assert memory_repository.variables["root_start_address"] == {
            "parent": "root",
            "name": "Start Address",
            "value": "Home",
            "profile": PROFILE_STRING,
            "position": 0,
        }
        assert memory_repository.categories["root_work"]["position"] == 0
        assert memory_repository.categories["root_gym"]["position"] == 1

        children = {
            ident: variable
            for ident, variable in memory_repository.variables.items()
            if variable["parent"] == "root_work"
        }
        assert [(v["name"], v["position"]) for v in children.values()] == [
            ("Distance", 0),
            ("Duration", 1),
            ("Traffic", 2),
        ]
        assert children["root_work_traffic"]["profile"] == PROFILE_PLUS_MINUTES
        assert children["root_work_duration"]["value"] == "20 mins, +3 Minutes"

    def test_idempotent(self, memory_repository):
        """Materializing the same result twice creates nothing new"""
        materialize(memory_repository, "root", sample_result().records())
        created = memory_repository.created
        snapshot = dict(memory_repository.variables)

        materialize(memory_repository, "root", sample_result().records())

        assert memory_repository.created == created == 9
        assert memory_repository.variables == snapshot

    def test_update_changes_value(self, memory_repository):
        materialize(memory_repository, "root", sample_result().records())

        updated = sample_result()
        updated.destinations["Gym"] = DestinationResult("2 km", "7 mins, +2 Minutes", 2.0)
        materialize(memory_repository, "root", updated.records())

        assert memory_repository.variables["root_gym_traffic"]["value"] == 2.0
        assert memory_repository.created == 9


class TestProfiles:
    """Test the profile table"""

    def test_lookup(self):
        assert profile_for("Traffic").name == PROFILE_PLUS_MINUTES
        assert profile_for("Distance").name == PROFILE_STRING
        assert profile_for("Something else").name == PROFILE_STRING

    def test_plus_minutes_format(self):
        profile = VARIABLE_PROFILES[PROFILE_PLUS_MINUTES]

        assert profile.format(3.0) == "+3 Minutes"
        assert profile.format(0.0) == "0 Minutes"
        assert profile.icon == "mdi:clock-outline"

    def test_string_format(self):
        assert VARIABLE_PROFILES[PROFILE_STRING].format("12 km") == "12 km"

    def test_make_ident(self):
        assert make_ident("root", "Start Address") == "root_start_address"

    def test_localized_suffix(self):
        profile = profile_for("Traffic", "Minuten")

        assert profile.name == PROFILE_PLUS_MINUTES
        assert profile.format(3.0) == "+3 Minuten"
        assert VARIABLE_PROFILES[PROFILE_PLUS_MINUTES].suffix == " Minutes"

    def test_label_ignored_for_strings(self):
        assert profile_for("Distance", "Minuten").format("12 km") == "12 km"

    def test_materialize_with_label(self, memory_repository):
        materialize(memory_repository, "root", sample_result().records(), "Minuten")

        assert memory_repository.profiles["root_work_traffic"].format(3.0) == "+3 Minuten"


class TestNameKey:
    """Test identifier normalization"""

    def test_separators_collapse(self):
        """Names differing only in separators share one key"""
        assert make_ident("root", "Work A") == "root_work_a"
        assert name_key("Work A") == name_key("Work_A") == name_key("work-a")

    def test_transliteration(self):
        assert name_key("公司") == "gongsi"
        assert make_ident("root", "回家") == "root_huijia"
