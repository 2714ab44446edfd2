"""Tests for resource models: status codes, ids, and lossless JSON round trips."""

import pytest
from pydantic import ValidationError

from bigml_parallel.resource.domain.errors import (
    CouldNotGetOutputError,
    OutputNotAvailableError,
    WrongResourceTypeError,
)
from bigml_parallel.resource.domain.id import check_resource_id, resource_type
from bigml_parallel.resource.domain.resource import (
    Execution,
    Output,
    Resource,
    resource_class_for,
)
from bigml_parallel.resource.domain.status import StatusCode

EXECUTION_JSON = {
    "resource": "execution/5f0a",
    "name": "score rows",
    "created": "2024-01-01T00:00:00.000000",
    "status": {"code": 5, "message": "The execution has been completed", "elapsed": 812},
    "execution": {
        "outputs": [["score", 0.92, "number"], ["label", None, "string"]],
        "result": 0.92,
    },
}


class TestStatusCode:
    @pytest.mark.parametrize(
        "code",
        [
            StatusCode.WAITING,
            StatusCode.QUEUED,
            StatusCode.STARTED,
            StatusCode.IN_PROGRESS,
            StatusCode.SUMMARIZED,
        ],
    )
    def test_working_codes(self, code: StatusCode) -> None:
        assert code.is_working()
        assert not code.is_ready()
        assert not code.is_err()

    def test_finished_is_ready(self) -> None:
        assert StatusCode.FINISHED.is_ready()
        assert not StatusCode.FINISHED.is_working()

    @pytest.mark.parametrize("code", [StatusCode.FAULTY, StatusCode.UNKNOWN])
    def test_error_codes(self, code: StatusCode) -> None:
        assert code.is_err()
        assert not code.is_working()

    def test_wire_values(self) -> None:
        assert StatusCode(-1) is StatusCode.FAULTY
        assert StatusCode(-2) is StatusCode.UNKNOWN
        assert StatusCode(5) is StatusCode.FINISHED


class TestResourceIds:
    def test_resource_type(self) -> None:
        assert resource_type("execution/abc") == "execution"

    @pytest.mark.parametrize("bad", ["execution", "/abc", "execution/", ""])
    def test_malformed_id_rejected(self, bad: str) -> None:
        with pytest.raises(WrongResourceTypeError):
            resource_type(bad)

    def test_check_accepts_matching_type(self) -> None:
        assert check_resource_id("script/123", "script") == "script/123"

    @pytest.mark.parametrize("bad", ["dataset/123", "script/", "scripts/1"])
    def test_check_rejects_other_types(self, bad: str) -> None:
        with pytest.raises(WrongResourceTypeError):
            check_resource_id(bad, "script")


class TestExecutionModel:
    def test_parses_known_fields(self) -> None:
        execution = Execution.model_validate(EXECUTION_JSON)
        assert execution.id == "execution/5f0a"
        assert execution.status.code is StatusCode.FINISHED
        assert execution.status.elapsed == 812

    def test_serialises_without_loss(self) -> None:
        execution = Execution.model_validate(EXECUTION_JSON)
        assert execution.to_json_dict() == EXECUTION_JSON

    def test_output_lookup(self) -> None:
        execution = Execution.model_validate(EXECUTION_JSON)
        score = execution.output("score")
        assert score is not None
        assert score.get() == 0.92
        assert score.type_ == "number"
        assert execution.output("missing") is None

    def test_unset_output_raises(self) -> None:
        execution = Execution.model_validate(EXECUTION_JSON)
        label = execution.output("label")
        assert label is not None
        with pytest.raises(CouldNotGetOutputError) as exc_info:
            label.get()
        assert isinstance(exc_info.value.original_error, OutputNotAvailableError)

    def test_output_pair_without_type(self) -> None:
        output = Output.model_validate(["score", 1])
        assert output.name == "score"
        assert output.type_ is None

    def test_empty_resource_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Resource.model_validate({"resource": "", "status": {"code": 5}})


class TestResourceClassFor:
    def test_execution_ids_use_execution_model(self) -> None:
        assert resource_class_for("execution/1") is Execution

    def test_other_ids_use_generic_model(self) -> None:
        assert resource_class_for("dataset/1") is Resource
