import pytest

from main import parse_call_args


def test_get_with_query_and_headers() -> None:
    call = parse_call_args(["get", "users", "--query", "active=true", "--query", "tag=a=b", "--header", "X-Tenant=t1"])
    assert call.method == "GET"
    assert call.path == "users"
    assert call.query == [("active", "true"), ("tag", "a=b")]
    assert call.headers == {"X-Tenant": "t1"}
    assert call.body is None


def test_post_parses_json_body() -> None:
    call = parse_call_args(["POST", "items", "--data", '{"id": 3, "tags": ["x"]}'])
    assert call.body == {"id": 3, "tags": ["x"]}
    assert call.query is None
    assert call.headers is None


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["POST", "items", "--query", "a=1"], "--query is only supported with GET"),
        (["DELETE", "items/1", "--query", "a=1"], "--query is only supported with GET"),
        (["GET", "items", "--data", "{}"], "--data is not supported with GET"),
        (["DELETE", "items/1", "--data", "{}"], "--data is not supported with DELETE"),
        (["PUT", "items/1", "--data", "{not json"], "--data is not valid JSON"),
        (["GET", "items", "--query", "novalue"], "--query expects KEY=VALUE"),
        (["GET", "items", "--header", "=value"], "--header expects KEY=VALUE"),
    ],
)
def test_invalid_combinations_exit_with_usage_error(
    argv: list[str],
    message: str,
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit) as exc:
        parse_call_args(argv)
    assert exc.value.code == 2
    assert message in capsys.readouterr().err
