import io

from schemamigrate.migration import DEFAULT_BUFFER_SIZE, Migration


def test_log_string_up():
    body = io.BytesIO(b"dumy migration that creates users table")
    migr = Migration(body, "create_users_table", 1486686016, 1486689359)
    assert migr.log_string() == "1486686016/u create_users_table"


def test_log_string_nil_migration():
    migr = Migration(None, "", 1486686016, 1486689359)
    assert migr.log_string() == "1486686016/u <empty>"


def test_log_string_nil_version():
    body = io.BytesIO(b"dumy migration that deletes users table")
    migr = Migration(body, "drop_users_table", 1486686016, -1)
    assert migr.log_string() == "1486686016/d drop_users_table"


def test_str_shows_versions():
    migr = Migration(None, "create_users_table", 1486686016, 1486689359)
    assert str(migr) == "create_users_table [1486686016=>1486689359]"


def test_nil_migration_has_timestamps_and_no_buffer():
    migr = Migration(None, "", 3, 4)
    assert migr.identifier == "<empty>"
    assert migr.started_buffering == migr.scheduled
    assert migr.finished_reading == migr.scheduled
    migr.buffer()
    assert migr.buffered_body is None
    assert migr.bytes_read == 0


def test_body_migration_uses_default_buffer_size():
    migr = Migration(io.BytesIO(b"x"), "id", 1, 1)
    assert migr.buffer_size == DEFAULT_BUFFER_SIZE
    assert migr.finished_reading is None


def test_buffer_reads_body_and_closes_it():
    data = b"CREATE TABLE users (id int);"
    body = io.BytesIO(data)
    migr = Migration(body, "users", 1, 1)
    migr.buffer()
    assert migr.buffered_body.read() == data
    assert migr.bytes_read == len(data)
    assert body.closed
    assert migr.started_buffering <= migr.finished_buffering <= migr.finished_reading


def test_buffer_with_small_buffer_size_keeps_everything():
    data = b"0123456789abcdef"
    migr = Migration(io.BytesIO(data), "small", 2, 2)
    migr.buffer_size = 3
    migr.buffer()
    assert migr.buffered_body.getvalue() == data
    assert migr.bytes_read == len(data)


def test_buffer_twice_is_harmless():
    data = b"SELECT 1;"
    migr = Migration(io.BytesIO(data), "twice", 1, 1)
    migr.buffer()
    migr.buffer()
    assert migr.buffered_body.getvalue() == data