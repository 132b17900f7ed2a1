"""Tests for configuration types and input parsing.

Configuration is validated once, at the edge; the engine trusts it.
"""

import json
from pathlib import Path

import pytest

from mlfq_sim.config import (
    ConfigError,
    JobConfig,
    QueueConfig,
    SchedulerConfig,
    SimulationConfig,
    config_from_mapping,
    config_to_mapping,
    jobs_total_workload,
    load_config,
    parse_bool,
    parse_bool_list,
    parse_int_list,
    parse_job,
    parse_jobs,
    queue_configs_from_lists,
)


class TestValueObjects:
    """Verify the frozen dataclasses and their checks."""

    def test_queue_config_defaults_to_back(self) -> None:
        """Admission at the back is the default."""
        assert not QueueConfig(quantum=10, allotment=20).admit_at_front

    def test_queue_config_is_frozen(self) -> None:
        """Configuration cannot be changed after construction."""
        config = QueueConfig(quantum=10, allotment=20)
        with pytest.raises(AttributeError):
            config.quantum = 5  # type: ignore[misc]

    def test_zero_quantum_rejected(self) -> None:
        """A queue must grant at least one tick."""
        with pytest.raises(ConfigError, match="quantum"):
            QueueConfig(quantum=0, allotment=20)

    def test_zero_allotment_rejected(self) -> None:
        """A queue must allow at least one tick of budget."""
        with pytest.raises(ConfigError, match="allotment"):
            QueueConfig(quantum=10, allotment=0)

    def test_negative_job_field_rejected(self) -> None:
        """Job fields are non-negative."""
        with pytest.raises(ConfigError, match="workload"):
            JobConfig(arrival_time=0, workload=-1)

    def test_non_integer_job_field_rejected(self) -> None:
        """Booleans are not accepted as integers."""
        with pytest.raises(ConfigError, match="integer"):
            JobConfig(arrival_time=True, workload=5)  # type: ignore[arg-type]

    def test_job_without_io(self) -> None:
        """io_interval 0 means the job never does I/O."""
        assert not JobConfig(arrival_time=0, workload=5).does_io
        assert JobConfig(0, 5, 2, 1).does_io

    def test_scheduler_config_defaults(self) -> None:
        """No boost, no bump, no stay by default."""
        config = SchedulerConfig()
        assert config.priority_boost_interval == 0
        assert not config.io_bump
        assert not config.io_stay

    def test_negative_boost_rejected(self) -> None:
        """A negative boost interval is meaningless."""
        with pytest.raises(ConfigError, match="priority_boost_interval"):
            SchedulerConfig(priority_boost_interval=-5)

    def test_simulation_config_needs_queue(self) -> None:
        """At least one queue is required."""
        with pytest.raises(ConfigError, match="at least one queue"):
            SimulationConfig(scheduler=SchedulerConfig(), queues=())

    def test_total_workload(self) -> None:
        """jobs_total_workload sums the workloads."""
        assert jobs_total_workload([JobConfig(0, 5), JobConfig(3, 7)]) == 12


class TestTextParsing:
    """Verify the delimited-string parsers."""

    def test_int_list(self) -> None:
        """Comma-separated integers, whitespace tolerated."""
        assert parse_int_list("10, 20,40") == [10, 20, 40]

    def test_int_list_rejects_garbage(self) -> None:
        """Non-numeric entries are configuration errors."""
        with pytest.raises(ConfigError, match="not an integer"):
            parse_int_list("10,abc")

    def test_int_list_rejects_negative(self) -> None:
        """Negative numbers are configuration errors."""
        with pytest.raises(ConfigError, match="negative"):
            parse_int_list("10,-1")

    def test_empty_int_list(self) -> None:
        """An empty list is an error."""
        with pytest.raises(ConfigError, match="empty"):
            parse_int_list("")

    def test_bool_words(self) -> None:
        """Flags accept 1/0 and yes/no style words."""
        assert parse_bool("1")
        assert parse_bool("True")
        assert not parse_bool("no")
        assert parse_bool_list("1,0,yes") == [True, False, True]

    def test_bad_bool(self) -> None:
        """Unknown flag words are rejected."""
        with pytest.raises(ConfigError, match="invalid flag"):
            parse_bool("maybe")

    def test_parse_job(self) -> None:
        """A job is arrival,workload,io_interval,io_duration."""
        assert parse_job("3,40,6,2") == JobConfig(3, 40, 6, 2)

    def test_job_arity(self) -> None:
        """Jobs must have exactly four fields."""
        with pytest.raises(ConfigError, match="4 fields"):
            parse_job("3,40,6")

    def test_parse_jobs(self) -> None:
        """Jobs are separated by colons."""
        assert parse_jobs("0,10,0,0:5,20,4,1") == [JobConfig(0, 10), JobConfig(5, 20, 4, 1)]

    def test_parse_no_jobs(self) -> None:
        """An empty job string means no jobs."""
        assert parse_jobs("") == []


class TestQueueLists:
    """Verify per-level list zipping."""

    def test_zips_lists(self) -> None:
        """Each level gets its own quantum and allotment."""
        configs = queue_configs_from_lists([5, 10], [10, 40])
        assert configs == [QueueConfig(5, 10), QueueConfig(10, 40)]

    def test_admission_flags(self) -> None:
        """Admission flags are applied per level."""
        configs = queue_configs_from_lists([5, 10], [10, 40], [True, False])
        assert [c.admit_at_front for c in configs] == [True, False]

    def test_length_mismatch(self) -> None:
        """Quantum and allotment lists must match in length."""
        with pytest.raises(ConfigError, match="2 quantums but 3 allotments"):
            queue_configs_from_lists([5, 10], [10, 20, 30])

    def test_flag_length_mismatch(self) -> None:
        """Admission flags must match too."""
        with pytest.raises(ConfigError, match="admission flags"):
            queue_configs_from_lists([5, 10], [10, 20], [True])

    def test_empty_ladder(self) -> None:
        """At least one level is required."""
        with pytest.raises(ConfigError, match="at least one queue"):
            queue_configs_from_lists([], [])


_DOCUMENT = {
    "queues": [
        {"quantum": 5, "allotment": 10, "admit_at_front": True},
        {"quantum": 10, "allotment": 100},
    ],
    "jobs": [[0, 20, 0, 0], {"arrival_time": 3, "workload": 7, "io_interval": 2}],
    "priority_boost_interval": 50,
    "io_bump": True,
}


class TestJsonDocuments:
    """Verify JSON configuration loading."""

    def test_from_mapping(self) -> None:
        """All sections are read, missing optional keys take defaults."""
        config = config_from_mapping(_DOCUMENT)
        assert config.queues == (QueueConfig(5, 10, admit_at_front=True), QueueConfig(10, 100))
        assert config.jobs == (JobConfig(0, 20), JobConfig(3, 7, 2, 0))
        assert config.scheduler == SchedulerConfig(50, io_bump=True, io_stay=False)

    def test_round_trip(self) -> None:
        """config_to_mapping produces a document that reads back the same."""
        config = config_from_mapping(_DOCUMENT)
        assert config_from_mapping(config_to_mapping(config)) == config

    def test_not_an_object(self) -> None:
        """The document must be a JSON object."""
        with pytest.raises(ConfigError, match="JSON object"):
            config_from_mapping([1, 2])

    def test_missing_queues(self) -> None:
        """Queues are mandatory."""
        with pytest.raises(ConfigError, match="'queues'"):
            config_from_mapping({"jobs": []})

    def test_queue_missing_field(self) -> None:
        """Every queue needs quantum and allotment."""
        with pytest.raises(ConfigError, match="missing 'allotment'"):
            config_from_mapping({"queues": [{"quantum": 5}]})

    def test_bad_job_arity(self) -> None:
        """List-form jobs need four fields."""
        with pytest.raises(ConfigError, match="4 fields"):
            config_from_mapping({"queues": [{"quantum": 5, "allotment": 5}], "jobs": [[0, 1]]})

    def test_unknown_job_field(self) -> None:
        """Typos in object-form jobs are reported."""
        doc = {"queues": [{"quantum": 5, "allotment": 5}], "jobs": [{"arrival": 0}]}
        with pytest.raises(ConfigError, match="unknown job fields: arrival"):
            config_from_mapping(doc)

    def test_bad_flag_type(self) -> None:
        """Switches must be JSON booleans."""
        doc = {"queues": [{"quantum": 5, "allotment": 5}], "io_stay": "yes"}
        with pytest.raises(ConfigError, match="io_stay"):
            config_from_mapping(doc)

    def test_load_config(self, tmp_path: Path) -> None:
        """load_config reads a JSON file."""
        path = tmp_path / "workload.json"
        path.write_text(json.dumps(_DOCUMENT))
        assert load_config(path) == config_from_mapping(_DOCUMENT)

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """A missing file is a configuration error."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.json")

    def test_load_directory(self, tmp_path: Path) -> None:
        """A directory instead of a file is a configuration error."""
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path)

    def test_load_invalid_utf8(self, tmp_path: Path) -> None:
        """Bytes that are not UTF-8 are a configuration error."""
        path = tmp_path / "binary.json"
        path.write_bytes(b'{"queues": "\xff\xfe"}')
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(path)

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        """A file that is not JSON is a configuration error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="not valid JSON"):
            load_config(path)
