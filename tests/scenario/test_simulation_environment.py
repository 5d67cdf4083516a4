"""
Tests for the scenario orchestrator and the command line entry point.
"""

import logging
import pytest
import sys
import os
from unittest.mock import patch

# Add src directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '../../src'))

from errors import ConfigurationError, SubmissionError, ScenarioError
from placement import ModulePlacementEdgewards, ModulePlacementMapping
from placement.logging import get_placement_logger
from simulation_environment import (ScenarioConfig, ScenarioBuilder, Scenario, ScenarioState,
                                    select_placement, DEFAULT_SEED)
from start_simulation import main, parse_arguments, config_from_arguments


class TestScenarioBuilder:
    """Test suite for ScenarioBuilder."""

    def test_reference_scenario_counts(self):
        build = ScenarioBuilder(ScenarioConfig(num_areas=1, cameras_per_area=2)).build()

        assert len(build.devices) == 5
        assert len(build.sensors) == 2
        assert len(build.actuators) == 2
        assert len(build.application.modules) == 2
        assert len(build.application.edges) == 3
        assert len(build.application.loops) == 1
        assert build.application.user_id == build.broker.id

    @pytest.mark.parametrize("areas,cameras", [(0, 0), (0, 2), (2, 0), (2, 3), (4, 1)])
    def test_counts_for_any_size(self, areas, cameras):
        build = ScenarioBuilder(ScenarioConfig(num_areas=areas, cameras_per_area=cameras)).build()

        assert len(build.devices) == 2 + areas + areas * cameras
        assert len(build.sensors) == len(build.actuators) == areas * cameras

    def test_endpoint_gateways(self):
        build = ScenarioBuilder(ScenarioConfig(num_areas=2, cameras_per_area=2)).build()
        by_id = {d.id: d for d in build.devices}

        for sensor, actuator in zip(build.sensors, build.actuators):
            camera = by_id[sensor.gateway_device_id]
            assert camera.name.startswith("camera-")
            assert actuator.gateway_device_id == camera.parent_id
            assert by_id[actuator.gateway_device_id].name.startswith("router-")
            assert sensor.name[len("sensor-"):] == actuator.name[len("ptz-"):] == camera.name[len("camera-"):]

    def test_cloud_flag_only_changes_mapping(self):
        edge = ScenarioBuilder(ScenarioConfig(num_areas=2, cameras_per_area=2, is_cloud=False)).build()
        cloud = ScenarioBuilder(ScenarioConfig(num_areas=2, cameras_per_area=2, is_cloud=True)).build()

        assert [d.name for d in edge.devices] == [d.name for d in cloud.devices]
        assert [s.name for s in edge.sensors] == [s.name for s in cloud.sensors]
        assert [a.name for a in edge.actuators] == [a.name for a in cloud.actuators]
        assert edge.application.edges == cloud.application.edges
        assert list(edge.application.modules) == list(cloud.application.modules)
        assert cloud.module_mapping.module_mapping == {
            "picture-capture": ["cloud"], "slot-detector": ["cloud"]}
        assert edge.module_mapping != cloud.module_mapping

        assert isinstance(select_placement(edge, False), ModulePlacementEdgewards)
        assert isinstance(select_placement(cloud, True), ModulePlacementMapping)

    def test_invalid_config(self):
        with pytest.raises(ConfigurationError):
            ScenarioBuilder(ScenarioConfig(cam_transmission_time=0)).build()
        with pytest.raises(ConfigurationError):
            ScenarioBuilder(ScenarioConfig(num_areas=-1)).build()
        with pytest.raises(ConfigurationError):
            ScenarioBuilder(ScenarioConfig(emission="bursty")).build()


class TestScenario:
    """Test suite for the scenario life cycle."""

    @pytest.mark.parametrize("is_cloud", [False, True])
    def test_completes(self, is_cloud):
        scenario = Scenario(ScenarioConfig(is_cloud=is_cloud, simulation_time=200))

        assert scenario.run() == ScenarioState.COMPLETED
        assert scenario.results is not None
        assert scenario.results.tuples_emitted > 0
        assert scenario.error is None

    def test_step_by_step_states(self):
        scenario = Scenario(ScenarioConfig(simulation_time=100))

        scenario.configure()
        assert scenario.state == ScenarioState.CONFIGURED
        scenario.submit()
        assert scenario.state == ScenarioState.SUBMITTED
        scenario.simulate()
        assert scenario.state == ScenarioState.COMPLETED

    def test_cannot_simulate_before_submit(self):
        scenario = Scenario(ScenarioConfig(simulation_time=100))
        scenario.configure()
        with pytest.raises(ScenarioError, match="must be submitted"):
            scenario.simulate()

    def test_no_areas_completes_without_traffic(self):
        scenario = Scenario(ScenarioConfig(num_areas=0, simulation_time=100))

        assert scenario.run() == ScenarioState.COMPLETED
        assert scenario.results.tuples_emitted == 0

    def test_build_failure_ends_failed(self):
        scenario = Scenario(ScenarioConfig(cam_transmission_time=-5))

        assert scenario.run() == ScenarioState.FAILED
        assert isinstance(scenario.error, ConfigurationError)
        assert scenario.controller is None

    @patch('simulation_environment.Controller.submit_application')
    def test_submission_failure_ends_failed(self, mock_submit):
        mock_submit.side_effect = SubmissionError("engine refused")
        scenario = Scenario(ScenarioConfig(simulation_time=100))

        assert scenario.run() == ScenarioState.FAILED
        assert str(scenario.error) == "engine refused"
        mock_submit.assert_called_once()
        assert scenario.results is None


class TestCommandLine:
    """Test suite for start_simulation."""

    def test_defaults(self):
        config = config_from_arguments(parse_arguments([]))

        assert config.num_areas == 1
        assert config.cameras_per_area == 2
        assert config.cam_transmission_time == 5.0
        assert config.is_cloud is False
        assert config.emission == "deterministic"

    def test_flags(self):
        config = config_from_arguments(parse_arguments(
            ["--areas", "3", "--cameras", "4", "--period", "2.5", "--cloud", "--seed", "7"]))

        assert (config.num_areas, config.cameras_per_area) == (3, 4)
        assert config.cam_transmission_time == 2.5
        assert config.is_cloud is True
        assert config.seed == 7

    def test_exit_status(self):
        assert main(["--time", "50", "--log-level", "WARNING"]) == 0
        assert main(["--areas", "-1", "--log-level", "WARNING"]) == 1

    def test_log_options_reach_placement_loggers(self, capsys, tmp_path):
        quiet_file = tmp_path / "quiet.log"
        verbose_file = tmp_path / "verbose.log"
        try:
            assert main(["--time", "20", "--log-level", "WARNING", "--log-file", str(quiet_file)]) == 0
            assert "[PLACEMENT]" not in capsys.readouterr().err
            assert "[PLACEMENT]" not in quiet_file.read_text()

            assert main(["--time", "20", "--log-level", "INFO", "--log-file", str(verbose_file)]) == 0
            assert "[PLACEMENT]" in capsys.readouterr().err
            assert "[placement.base]" in verbose_file.read_text()
        finally:
            for handler in logging.root.handlers[:]:
                logging.root.removeHandler(handler)
                handler.close()

    def test_placement_logger_names(self):
        assert get_placement_logger("placement.base").name == "placement.base"
        assert get_placement_logger("mapping").name == "placement.mapping"


class TestScenarioSeed:
    """Test suite for seed resolution."""

    def test_explicit_seed_wins(self, monkeypatch):
        monkeypatch.setenv("SCENARIO_SEED", "99")
        assert ScenarioConfig(seed=7).resolved_seed() == 7

    def test_seed_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCENARIO_SEED", "7")
        assert ScenarioConfig().resolved_seed() == 7

    def test_default_seed(self, monkeypatch):
        monkeypatch.delenv("SCENARIO_SEED", raising=False)
        assert ScenarioConfig().resolved_seed() == DEFAULT_SEED

    def test_invalid_environment_seed_ends_failed(self, monkeypatch):
        monkeypatch.setenv("SCENARIO_SEED", "abc")
        scenario = Scenario(ScenarioConfig(simulation_time=50))

        assert scenario.run() == ScenarioState.FAILED
        assert isinstance(scenario.error, ConfigurationError)
        assert "SCENARIO_SEED" in str(scenario.error)
        assert main(["--time", "20", "--log-level", "WARNING"]) == 1


if __name__ == "__main__":
    pytest.main([__file__])
