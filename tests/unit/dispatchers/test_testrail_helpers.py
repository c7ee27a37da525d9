"""Tests for TestRail case extraction and result mapping."""

import pytest
from pydantic import SecretStr, ValidationError

from bdd_report.dispatchers.testrail import TestRailConfig
from bdd_report.dispatchers.testrail.dispatcher import (
    extract_case_id,
    result_comment,
    status_id_for,
)
from bdd_report.testing.factories import ScenarioOutcomeFactory


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ({"@C482"}, 482),
        ({"@smoke", "@C100"}, 100),
        ({"@smoke"}, None),
        (set(), None),
        ({"@C"}, None),
        ({"@C12abc"}, None),
        ({"@GTECH-1"}, None),
    ],
)
def test_extract_case_id(tags: set[str], expected: int | None) -> None:
    """Only a full ``@C<digits>`` tag names a case."""
    assert extract_case_id(tags) == expected


def test_status_ids() -> None:
    """Passed maps to 1, every other status to failed."""
    assert status_id_for("PASSED") == 1
    assert status_id_for("FAILED") == 5
    assert status_id_for("SKIPPED") == 5


def test_result_comment() -> None:
    """Comments name the verdict and the scenario."""
    outcome = ScenarioOutcomeFactory.build(name="Checkout", status="FAILED")

    assert result_comment(outcome) == "Test failed: Checkout"


def test_config_requires_key_and_suite() -> None:
    """Both the key and the suite id enable the integration."""
    url = "http://testrail.test"

    assert TestRailConfig(url=url, key=SecretStr("k"), suite_id=3).enabled is True
    assert TestRailConfig(url=url, key=SecretStr("k"), suite_id=None).enabled is False
    assert TestRailConfig(url=url, key=None, suite_id=3).enabled is False
    assert TestRailConfig(url=url).url == "http://testrail.test/"


def test_config_rejects_url_without_scheme() -> None:
    """A bare host is a configuration error, not a request-time failure."""
    with pytest.raises(ValidationError, match="absolute http"):
        TestRailConfig(url="testrail.mycompany.com")
