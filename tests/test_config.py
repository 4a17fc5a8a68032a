"""
TOML configuration with environment overrides.
"""

import pytest

from chaingov.config import ChainGovConfig, load_config, parse_amount
from chaingov.constants import ONE_TOKEN, TIMELOCK_DEFAULT_DELAY
from chaingov.exceptions import ConfigurationError
from chaingov.governance import GovernanceParameters


CONFIG_TOML = """
[governor]
name = "Test Governor"
quorum_votes = "1_000e18"
proposal_threshold = 10
voting_delay = 3
voting_period = 40

[timelock]
delay = 259200

[chain]
chain_id = 5

[logging]
level = "debug"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "CHAINGOV_CONFIG",
        "CHAINGOV_QUORUM_VOTES",
        "CHAINGOV_VOTING_PERIOD",
        "CHAINGOV_TIMELOCK_DELAY",
        "CHAINGOV_CHAIN_ID",
        "CHAINGOV_GOVERNOR_NAME",
        "LOG_LEVEL",
        "LOG_FILE_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestParseAmount:

    @pytest.mark.parametrize("raw, expected", [
        (7, 7),
        ("7", 7),
        ("400_000e18", 400_000 * ONE_TOKEN),
        ("0x10", 16),
        ("1.5e1", 15),
    ])
    def test_valid(self, raw, expected):
        assert parse_amount(raw, "x") == expected

    @pytest.mark.parametrize("raw", ["1.5", "abc", True, 1.0, None])
    def test_invalid(self, raw):
        with pytest.raises(ConfigurationError):
            parse_amount(raw, "x")


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "absent.toml"))
        assert config.governance_parameters() == GovernanceParameters()
        assert config.timelock.delay == TIMELOCK_DEFAULT_DELAY

    def test_file_values(self, tmp_path):
        path = tmp_path / "chaingov.toml"
        path.write_text(CONFIG_TOML)
        config = load_config(str(path))
        params = config.governance_parameters()
        assert params.quorum_votes == 1_000 * ONE_TOKEN
        assert params.proposal_threshold == 10
        assert params.voting_delay == 3
        assert params.voting_period == 40
        assert params.proposal_max_operations == 10
        assert config.governor.name == "Test Governor"
        assert config.timelock.delay == 3 * 86400
        assert config.chain.chain_id == 5
        assert config.logging.level == "DEBUG"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "chaingov.toml"
        path.write_text(CONFIG_TOML)
        monkeypatch.setenv("CHAINGOV_QUORUM_VOTES", "2000e18")
        monkeypatch.setenv("CHAINGOV_TIMELOCK_DELAY", str(4 * 86400))
        config = load_config(str(path))
        assert config.governor.quorum_votes == 2_000 * ONE_TOKEN
        assert config.timelock.delay == 4 * 86400

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "other.toml"
        path.write_text(CONFIG_TOML)
        monkeypatch.setenv("CHAINGOV_CONFIG", str(path))
        assert load_config().chain.chain_id == 5

    def test_params_from_config(self, tmp_path):
        path = tmp_path / "chaingov.toml"
        path.write_text(CONFIG_TOML)
        config = load_config(str(path))
        assert GovernanceParameters.from_config(config).voting_period == 40


class TestValidation:

    def _load(self, tmp_path, text):
        path = tmp_path / "chaingov.toml"
        path.write_text(text)
        return load_config(str(path))

    def test_delay_out_of_bounds(self, tmp_path):
        with pytest.raises(ConfigurationError, match="timelock.delay"):
            self._load(tmp_path, "[timelock]\ndelay = 60\n")

    def test_zero_voting_period(self, tmp_path):
        with pytest.raises(ConfigurationError, match="voting_period"):
            self._load(tmp_path, "[governor]\nvoting_period = 0\n")

    def test_negative_threshold(self, tmp_path):
        with pytest.raises(ConfigurationError):
            self._load(tmp_path, "[governor]\nproposal_threshold = -1\n")

    def test_bad_log_level(self, tmp_path):
        with pytest.raises(ConfigurationError, match="log level"):
            self._load(tmp_path, "[logging]\nlevel = \"LOUD\"\n")

    def test_section_must_be_table(self, tmp_path):
        with pytest.raises(ConfigurationError, match="must be a table"):
            self._load(tmp_path, "governor = 3\n")

    def test_broken_toml(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            self._load(tmp_path, "[governor\n")

    def test_to_dict(self):
        data = ChainGovConfig().to_dict()
        assert data["governor"]["votingPeriod"] == 17_280
        assert data["timelock"]["delay"] == TIMELOCK_DEFAULT_DELAY
