import io

from _logging import LEVELS, Logger


def make_logger() -> Logger:
    return Logger(stream=io.StringIO(), use_color=False, show_time=False)


def test_child_follows_parent_level_change() -> None:
    root = make_logger()
    child = root.child("REMOTE")
    grandchild = child.bind(run=1)

    root.set_level("debug")

    assert child.level_no == LEVELS["debug"]
    assert grandchild.level_no == LEVELS["debug"]
    child.debug("now visible")
    assert "[debug] [REMOTE] now visible" in root.stream.getvalue()


def test_unknown_level_keeps_current() -> None:
    root = make_logger()
    root.set_level("warn")
    root.set_level("loud")

    assert root.level_name == "warn"


def test_recent_is_shared_and_filtered_by_module() -> None:
    root = make_logger()
    root.child("A").info("one")
    root.child("B").warn("two")

    assert [r["msg"] for r in root.recent()] == ["one", "two"]
    assert [r["level"] for r in root.recent(module="B")] == ["warn"]
    assert root.recent(limit=1)[0]["msg"] == "two"
