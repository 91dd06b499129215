from http import HTTPStatus

import pytest

from utils.result import Result


class TestResult:
    """
    Tests for the Result type.
    """

    def test_ok(self):
        result = Result.ok(5)

        assert result.is_success()
        assert result.data == 5
        assert result.errors == []
        assert result.error is None
        assert result.status_code == HTTPStatus.OK

    @pytest.mark.parametrize(
        "error, expected",
        [("bad", ["bad"]), (["a", "b"], ["a", "b"])],
        ids=["single-message", "message-list"]
    )
    def test_fail(self, error, expected):
        result = Result.fail(error)

        assert result.is_failure()
        assert result.errors == expected
        assert result.error == expected[0]
        assert result.status_code == HTTPStatus.BAD_REQUEST

    def test_int_status_code_is_converted(self):
        assert Result.fail("gone", status_code=500).status_code == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_map_and_and_then(self):
        assert Result.ok(2).map(lambda x: x * 3).data == 6
        assert Result.ok(2).and_then(lambda x: Result.fail("no")).errors == ["no"]

    def test_failure_short_circuits(self):
        calls = []
        failed = Result.fail(["x", "y"], status_code=HTTPStatus.INTERNAL_SERVER_ERROR)

        mapped = failed.map(calls.append)
        chained = failed.and_then(lambda value: Result.ok(calls.append(value)))

        assert calls == []
        assert mapped.errors == chained.errors == ["x", "y"]
        assert chained.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
