import re
from datetime import datetime, timezone

from storefront.utils.activity_log import ensure_log_file, format_line, log_activity


def test_format_line():
    when = datetime(2026, 1, 31, 12, 0, tzinfo=timezone.utc)

    assert format_line("Product created (id=1, name=Mug)", when) == (
        "[2026-01-31T12:00:00+00:00] Product created (id=1, name=Mug)\n"
    )


def test_log_activity_appends_lines(tmp_path):
    path = str(tmp_path / "logs" / "activity.log")

    assert log_activity("first", path=path)
    assert log_activity("second", path=path)

    with open(path, encoding="utf-8") as fh:
        lines = fh.read().splitlines()
    assert len(lines) == 2
    assert re.match(r"^\[\d{4}-\d{2}-\d{2}T[\d:.]+\+00:00\] first$", lines[0])
    assert lines[1].endswith("] second")


def test_log_activity_failure_is_swallowed(tmp_path):
    # A directory cannot be opened for appending.
    assert log_activity("lost", path=str(tmp_path)) is False


def test_ensure_log_file_keeps_existing_content(tmp_path):
    path = tmp_path / "activity.log"
    path.write_text("[old] entry\n", encoding="utf-8")

    ensure_log_file(str(path))

    assert path.read_text(encoding="utf-8") == "[old] entry\n"


def test_order_succeeds_when_log_is_unwritable(client, app, customer, product, tmp_path):
    app.config["ACTIVITY_LOG_PATH"] = str(tmp_path)

    resp = client.post("/orders", json={"items": [{"productId": product["id"], "quantity": 1}]},
                       headers=customer.headers)

    assert resp.status_code == 201
