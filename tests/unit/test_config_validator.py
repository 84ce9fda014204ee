import pytest
from pydantic import ValidationError

from ppcrecon.common.config_validator import load_and_validate_config
from ppcrecon.ingestion_utils import load_config
from ppcrecon.standards.column_resolver import BUSINESS_REPORT_SYNONYMS


def test_defaults_from_empty_config():
    config = load_and_validate_config({})
    assert config.audit.acos_threshold == 25.0
    assert config.audit.spend_threshold == 100.0
    assert config.logging.level == "INFO"
    assert config.logging.file_name == "ppcrecon.log"
    assert config.columns.business_synonyms() == BUSINESS_REPORT_SYNONYMS
    assert load_and_validate_config(None).audit.acos_threshold == 25.0


def test_overrides_merge_per_field():
    config = load_and_validate_config(
        {
            "columns": {"business_report": {"sku": ["item id"]}, "search_term_report": {"spend": ["outlay"]}},
            "audit": {"acos_threshold": 30},
            "logging": {"level": "debug"},
        }
    )
    synonyms = config.columns.business_synonyms()
    assert synonyms["sku"] == ["item id"]
    assert synonyms["sessions"] == BUSINESS_REPORT_SYNONYMS["sessions"]
    assert config.columns.search_term_tokens()["spend"] == ["outlay"]
    assert config.audit.acos_threshold == 30.0
    assert config.logging.level == "DEBUG"


@pytest.mark.parametrize(
    "raw",
    [
        {"audit": {"acos_threshold": -1}},
        {"audit": {"spend_threshold": -0.5}},
        {"columns": {"business_report": {"sku": []}}},
        {"columns": {"search_term_report": {"date": ["  "]}}},
        {"logging": {"level": "LOUD"}},
    ],
)
def test_invalid_config_raises(raw):
    with pytest.raises(ValidationError):
        load_and_validate_config(raw)


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("audit:\n  spend_threshold: 42\n", encoding="utf-8")
    assert load_config(path) == {"audit": {"spend_threshold": 42}}
    assert load_config(tmp_path / "absent.yaml") == {}
